import logging
import os
from typing import Optional

import vertexai
from vertexai.generative_models import GenerationConfig, GenerativeModel

from ..errors import GenerationError
from .base import DEFAULT_TEMPERATURE, LLMProvider

logger = logging.getLogger(__name__)


class VertexAIError(GenerationError):
    """Raised when Vertex AI cannot be initialized or returns no text."""
    pass


def _initialize_vertex_ai(project_id: str, location: str, credentials_path: Optional[str] = None) -> None:
    """Initialize Vertex AI with project credentials"""
    if credentials_path:
        os.environ['GOOGLE_APPLICATION_CREDENTIALS'] = credentials_path
    try:
        vertexai.init(project=project_id, location=location)
    except Exception as e:
        raise VertexAIError(f"failed to initialize Vertex AI: {e}") from e
    logger.info(f"[VERTEX] Initialized with project={project_id}, location={location}")


class VertexProvider(LLMProvider):
    """Gemini on Vertex AI through the vertexai SDK.

    The SDK has no per-call timeout; the caller's deadline cancels the
    async gRPC call.
    """

    def __init__(
        self,
        project_id: str,
        location: str = "us-central1",
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        credentials_path: Optional[str] = None,
    ):
        if not project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT_ID is required")
        _initialize_vertex_ai(project_id, location, credentials_path)
        self.model = model or "gemini-2.5-flash"
        self.temperature = temperature or DEFAULT_TEMPERATURE
        self.max_tokens = max_tokens or 8192

    def get_provider_name(self) -> str:
        return "Vertex AI Gemini"

    async def generate_response(self, system_prompt: str, user_message: str) -> str:
        model = GenerativeModel(
            self.model,
            system_instruction=[system_prompt] if system_prompt else None,
        )
        try:
            response = await model.generate_content_async(
                user_message,
                generation_config=GenerationConfig(
                    temperature=self.temperature,
                    max_output_tokens=self.max_tokens,
                ),
            )
            # .text raises ValueError when the candidate was blocked or empty
            return response.text
        except ValueError as e:
            raise VertexAIError(f"no response from Vertex AI: {e}") from e
        except Exception as e:
            raise VertexAIError(f"vertex request failed: {e}") from e
