import os
from dotenv import load_dotenv
from pathlib import Path

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path(__file__).parent.parent / '.env')


def _float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


# WhatsApp transport
#
# WHATSAPP_PROVIDER selects the outgoing channel: "waha" or "greenapi".
WHATSAPP_PROVIDER = os.getenv("WHATSAPP_PROVIDER", "waha")
WAHA_BASE_URL = os.getenv("WAHA_BASE_URL", "http://localhost:3000")
WAHA_API_KEY = os.getenv("WAHA_API_KEY")
WAHA_SESSION_ID = os.getenv("WAHA_SESSION_ID", "default")
GREEN_API_URL = os.getenv("GREEN_API_URL", "https://api.green-api.com")
GREEN_API_INSTANCE_ID = os.getenv("GREEN_API_INSTANCE_ID")
GREEN_API_TOKEN = os.getenv("GREEN_API_TOKEN")

# LLM Configuration
LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openai")
LLM_MODEL = os.getenv("LLM_MODEL")  # empty -> provider default
LLM_TEMPERATURE = _float("LLM_TEMPERATURE", 0.7)
LLM_MAX_TOKENS = _int("LLM_MAX_TOKENS", 1024)

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
GROQ_API_KEY = os.getenv("GROQ_API_KEY")
DEEPSEEK_API_KEY = os.getenv("DEEPSEEK_API_KEY")
CLAUDE_API_KEY = os.getenv("CLAUDE_API_KEY")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

# Vertex AI Configuration
GOOGLE_CLOUD_PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT_ID")
VERTEX_AI_LOCATION = os.getenv("VERTEX_AI_LOCATION", "us-central1")
GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS")

# Engine Configuration
RATE_LIMIT_SECONDS = _float("RATE_LIMIT_SECONDS", 2.0)
GENERATION_TIMEOUT_SECONDS = _float("GENERATION_TIMEOUT_SECONDS", 10.0)

# Conversation log workers. Overflow policy: "drop_oldest" or "reject".
LOG_QUEUE_SIZE = _int("LOG_QUEUE_SIZE", 1000)
LOG_WORKERS = _int("LOG_WORKERS", 4)
LOG_OVERFLOW_POLICY = os.getenv("LOG_OVERFLOW_POLICY", "drop_oldest")

# Knowledge base retrieval: "structured" (SQL) or "vector" (semantic search)
KB_RETRIEVER = os.getenv("KB_RETRIEVER", "structured")
KB_VECTOR_MAX_RESULTS = _int("KB_VECTOR_MAX_RESULTS", 5)

# Vector DB Configuration
VECTOR_PROVIDER = os.getenv("VECTOR_PROVIDER", "qdrant_self_hosted")
VECTOR_COLLECTION = os.getenv("VECTOR_COLLECTION", "knowledge_base")
QDRANT_URL = os.getenv("QDRANT_URL", "http://localhost:6333")
QDRANT_API_KEY = os.getenv("QDRANT_API_KEY")
CHROMA_PERSIST_DIR = os.getenv(
    "CHROMA_PERSIST_DIR", str(Path(__file__).parent / "vector" / "chroma_db")
)
EMBEDDING_PROVIDER = os.getenv("EMBEDDING_PROVIDER", "openai")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL")

# Database Configuration
DB_HOST = os.getenv("DB_HOST")
DB_PORT = _int("DB_PORT", 3306)
DB_USER = os.getenv("DB_USER")
DB_PASSWORD = os.getenv("DB_PASSWORD")
DB_NAME = os.getenv("DB_NAME")
