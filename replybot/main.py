from fastapi import BackgroundTasks, FastAPI, Request
import logging
from typing import Optional

from . import config
from .adapters import detect_channel, get_adapter_for_channel
from .conversation_log import ConversationLogger
from .database_client import Database
from .engine import Engine
from .kb.retriever import StructuredRetriever
from .llm.provider import load_provider_from_env
from .llm.service import LLMService
from .log_queue import ConversationLogQueue
from .rate_limiter import RateLimiter
from .tenant_resolver import TenantResolver

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

engine: Optional[Engine] = None


async def build_knowledge(db: Database):
    """Structured SQL retrieval by default; semantic search when KB_RETRIEVER=vector."""
    structured = StructuredRetriever(db)
    if config.KB_RETRIEVER == "structured":
        return structured
    if config.KB_RETRIEVER != "vector":
        raise ValueError(f"unsupported KB_RETRIEVER: {config.KB_RETRIEVER}")

    from .kb.vector_retriever import VectorRetriever
    from .vector.embedder import load_embedder_from_env
    from .vector.service import VectorService
    from .vector.store import new_vector_store

    store = new_vector_store(
        config.VECTOR_PROVIDER,
        url=config.QDRANT_URL,
        api_key=config.QDRANT_API_KEY,
        persist_dir=config.CHROMA_PERSIST_DIR,
    )
    await store.initialize()
    service = VectorService(store, load_embedder_from_env())
    retriever = VectorRetriever(
        service,
        structured,
        collection=config.VECTOR_COLLECTION,
        max_results=config.KB_VECTOR_MAX_RESULTS,
    )
    await retriever.initialize()
    return retriever


async def build_engine() -> Engine:
    db = Database()
    log_queue = ConversationLogQueue(
        ConversationLogger(db).log_record,
        maxsize=config.LOG_QUEUE_SIZE,
        workers=config.LOG_WORKERS,
        overflow_policy=config.LOG_OVERFLOW_POLICY,
    )
    return Engine(
        rate_limiter=RateLimiter(cooldown_seconds=config.RATE_LIMIT_SECONDS),
        tenant_resolver=TenantResolver(db),
        knowledge=await build_knowledge(db),
        llm=LLMService(load_provider_from_env()),
        dispatcher=get_adapter_for_channel(config.WHATSAPP_PROVIDER),
        log_queue=log_queue,
        generation_timeout=config.GENERATION_TIMEOUT_SECONDS,
    )


@app.on_event("startup")
async def startup_event():
    global engine
    engine = await build_engine()
    engine.log_queue.start()
    logger.info(
        f"[STARTUP] Engine ready (llm={engine.llm.get_provider_name()}, "
        f"kb={config.KB_RETRIEVER}, whatsapp={config.WHATSAPP_PROVIDER})"
    )


@app.on_event("shutdown")
async def shutdown_event():
    if engine is None:
        return
    await engine.log_queue.stop(timeout=10.0)
    logger.info("[SHUTDOWN] Log queue drained")
    await engine.llm.aclose()
    await engine.knowledge.close()
    logger.info(f"[SHUTDOWN] Closed {config.KB_RETRIEVER} knowledge backend")


@app.get("/health")
def health():
    if engine is None:
        return {"status": "starting"}
    return {
        "status": "ok",
        "llm_provider": engine.llm.get_provider_name(),
        "whatsapp_provider": config.WHATSAPP_PROVIDER,
        "log_queue_depth": engine.log_queue.qsize(),
        "log_dropped": engine.log_queue.dropped,
    }


@app.post("/webhook")
async def webhook(request: Request, background_tasks: BackgroundTasks):
    """Inbound message webhook for WAHA and GreenAPI.

    Answers immediately; the reply pipeline runs as a background task.
    """
    try:
        data = await request.json()
    except ValueError:
        logger.error("[WEBHOOK] Could not parse request body as JSON")
        return {"status": "error", "detail": "invalid JSON"}

    try:
        channel = detect_channel(data)
    except ValueError:
        logger.warning("[WEBHOOK] Unknown channel for payload, ignoring")
        return {"status": "ignored"}

    event = await get_adapter_for_channel(channel).parse_incoming(data)
    if event is None:
        return {"status": "ignored"}

    if engine is None:
        logger.error("[WEBHOOK] Engine not initialized, dropping message")
        return {"status": "error", "detail": "not ready"}

    background_tasks.add_task(engine.handle_event, event)
    return {"status": "ok"}
