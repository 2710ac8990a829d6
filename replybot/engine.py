"""
Reply engine: turns one inbound event into at most one outbound reply.

Pipeline per event:
    rate limit -> tenant -> knowledge -> prompt -> generation (deadline)
    -> dispatch -> detached conversation log

Each stage runs exactly once. Tenant and knowledge failures end the event
with a fixed apology; generation failures degrade to a fixed fallback
reply; a failed dispatch ends the event without logging.
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, Dict, Protocol

from .adapters.base_channel_adapter import ChannelAdapter
from .errors import (
    APOLOGY_MESSAGE,
    FALLBACK_REPLY,
    DispatchError,
    GenerationError,
    RetrievalError,
    TenantResolutionError,
)
from .llm.service import LLMService
from .log_queue import ConversationLogQueue
from .models.conversation import ConversationRecord
from .models.incoming_event import IncomingEvent
from .models.tenant import TenantContext
from .rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

DEFAULT_MODULE = "saas"
DEFAULT_GENERATION_TIMEOUT_SECONDS = 10.0


class EventOutcome(str, Enum):
    IGNORED = "ignored"                    # empty text
    DROPPED = "dropped"                    # throttled
    TENANT_FAILED = "tenant_failed"        # apology sent
    RETRIEVAL_FAILED = "retrieval_failed"  # apology sent
    DISPATCH_FAILED = "dispatch_failed"    # nothing logged
    SENT = "sent"


class TenantSource(Protocol):
    async def resolve(self, sender_id: str) -> TenantContext: ...


class KnowledgeSource(Protocol):
    async def build_prompt(self, tenant: TenantContext, query: str) -> str: ...

    async def close(self) -> None: ...


Handler = Callable[[TenantContext, IncomingEvent], Awaitable[EventOutcome]]


class Engine:
    def __init__(
        self,
        rate_limiter: RateLimiter,
        tenant_resolver: TenantSource,
        knowledge: KnowledgeSource,
        llm: LLMService,
        dispatcher: ChannelAdapter,
        log_queue: ConversationLogQueue,
        generation_timeout: float = DEFAULT_GENERATION_TIMEOUT_SECONDS,
    ):
        self.rate_limiter = rate_limiter
        self.tenant_resolver = tenant_resolver
        self.knowledge = knowledge
        self.llm = llm
        self.dispatcher = dispatcher
        self.log_queue = log_queue
        self.generation_timeout = generation_timeout

        # farmasi and umkm have no dedicated handler yet and reuse the generic one.
        self._handlers: Dict[str, Handler] = {
            "saas": self._handle_generic,
            "farmasi": self._pending_module("farmasi"),
            "umkm": self._pending_module("umkm"),
        }

    def handler_for(self, module: str) -> Handler:
        handler = self._handlers.get(module)
        if handler is None:
            logger.info(f"[ENGINE] Unknown module '{module}', using '{DEFAULT_MODULE}' handler")
            handler = self._handlers[DEFAULT_MODULE]
        return handler

    def _pending_module(self, module: str) -> Handler:
        async def handler(tenant: TenantContext, event: IncomingEvent) -> EventOutcome:
            logger.info(f"[ENGINE] Module '{module}' has no dedicated handler, using generic handler")
            return await self._handle_generic(tenant, event)
        return handler

    async def handle_event(self, event: IncomingEvent) -> EventOutcome:
        """Run the full pipeline for one event and report how it ended."""
        sender = event.sender_id
        if not event.text or not event.text.strip():
            return EventOutcome.IGNORED

        if not self.rate_limiter.allow(sender):
            return EventOutcome.DROPPED

        try:
            tenant = await self.tenant_resolver.resolve(sender)
        except TenantResolutionError as e:
            logger.error(f"[TENANT] Failed to resolve tenant for {sender}: {e}")
            await self._send_apology(sender)
            return EventOutcome.TENANT_FAILED

        logger.info(
            f"[ENGINE] [{tenant.module}|{tenant.role}|{tenant.company_id}] Message from {sender}: {event.text}"
        )
        return await self.handler_for(tenant.module)(tenant, event)

    async def _handle_generic(self, tenant: TenantContext, event: IncomingEvent) -> EventOutcome:
        sender = event.sender_id

        try:
            system_prompt = await self.knowledge.build_prompt(tenant, event.text)
        except RetrievalError as e:
            logger.error(f"[KB] Failed to load knowledge for client {tenant.client_id}: {e}")
            await self._send_apology(sender)
            return EventOutcome.RETRIEVAL_FAILED

        reply = await self._generate(system_prompt, event.text)

        try:
            await self.dispatcher.send_outgoing(sender, reply)
        except DispatchError as e:
            logger.error(f"[ENGINE] Failed to send reply to {sender}: {e}")
            return EventOutcome.DISPATCH_FAILED

        self.log_queue.submit(ConversationRecord(
            client_id=tenant.client_id,
            sender_id=sender,
            request_text=event.text,
            response_text=reply,
        ))
        return EventOutcome.SENT

    async def _generate(self, system_prompt: str, user_message: str) -> str:
        try:
            reply = await self.llm.generate_response(
                system_prompt, user_message, timeout=self.generation_timeout
            )
        except GenerationError as e:
            logger.warning(f"[LLM] {self.llm.get_provider_name()} failed, sending fallback: {e}")
            return FALLBACK_REPLY

        if not reply or not reply.strip():
            logger.warning(f"[LLM] {self.llm.get_provider_name()} returned an empty reply, sending fallback")
            return FALLBACK_REPLY
        return reply.strip()

    async def _send_apology(self, sender: str) -> None:
        try:
            await self.dispatcher.send_outgoing(sender, APOLOGY_MESSAGE)
        except DispatchError as e:
            logger.error(f"[ENGINE] Failed to send apology to {sender}: {e}")
