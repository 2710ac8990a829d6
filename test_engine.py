#!/usr/bin/env python3
"""
End-to-end tests for the reply engine with fake collaborators
"""
import asyncio

import httpx

from replybot.engine import DEFAULT_MODULE, Engine, EventOutcome
from replybot.errors import (
    APOLOGY_MESSAGE,
    FALLBACK_REPLY,
    DispatchError,
    GenerationError,
    RetrievalError,
    TenantResolutionError,
)
from replybot.llm.base import LLMProvider
from replybot.llm.claude import ClaudeProvider
from replybot.llm.prompt_builder import build_system_prompt
from replybot.llm.service import LLMService
from replybot.log_queue import ConversationLogQueue
from replybot.models import FAQ, IncomingEvent, KnowledgeSnapshot, TenantContext
from replybot.rate_limiter import RateLimiter

TOKO_X = TenantContext(module="saas", role="customer", company_id="c1", client_id="c1")
TOKO_X_KB = KnowledgeSnapshot(
    business_name="Toko X",
    tone="ramah",
    faqs=(FAQ("Jam buka?", "08:00–17:00"),),
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeResolver:
    def __init__(self, tenant=TOKO_X, error=None):
        self.tenant = tenant
        self.error = error
        self.calls = []

    async def resolve(self, sender_id):
        self.calls.append(sender_id)
        if self.error:
            raise self.error
        return self.tenant


class FakeKnowledge:
    def __init__(self, snapshot=TOKO_X_KB, error=None):
        self.snapshot = snapshot
        self.error = error
        self.calls = []

    async def build_prompt(self, tenant, query):
        self.calls.append((tenant.client_id, query))
        if self.error:
            raise self.error
        return build_system_prompt(self.snapshot)


class FakeProvider(LLMProvider):
    model = "fake"
    temperature = 0.7
    max_tokens = 100

    def __init__(self, reply="Kami buka jam 08:00 sampai 17:00", error=None, delay=0.0):
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls = []
        self.cancelled = False

    def get_provider_name(self):
        return "Fake"

    async def generate_response(self, system_prompt, user_message):
        self.calls.append((system_prompt, user_message))
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.error:
            raise self.error
        return self.reply


class FakeDispatcher:
    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send_outgoing(self, user_id, message):
        if self.error:
            raise self.error
        self.sent.append((user_id, message))


class FakeLogQueue:
    def __init__(self):
        self.records = []

    def submit(self, record):
        self.records.append(record)
        return True


def make_engine(resolver=None, knowledge=None, provider=None, dispatcher=None, log_queue=None,
                clock=None, timeout=10.0):
    return Engine(
        rate_limiter=RateLimiter(cooldown_seconds=2.0, clock=clock or FakeClock()),
        tenant_resolver=resolver or FakeResolver(),
        knowledge=knowledge or FakeKnowledge(),
        llm=LLMService(provider or FakeProvider()),
        dispatcher=dispatcher or FakeDispatcher(),
        log_queue=log_queue or FakeLogQueue(),
        generation_timeout=timeout,
    )


def event(text="Jam buka jam berapa?", sender="628123"):
    return IncomingEvent(sender_id=sender, text=text, channel="waha")


def test_happy_path_sends_reply_and_logs():
    provider = FakeProvider()
    dispatcher = FakeDispatcher()
    log_queue = FakeLogQueue()
    engine = make_engine(provider=provider, dispatcher=dispatcher, log_queue=log_queue)

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.SENT
    system_prompt, user_message = provider.calls[0]
    assert "Toko X" in system_prompt
    assert "Jam buka?" in system_prompt
    assert "08:00–17:00" in system_prompt
    assert user_message == "Jam buka jam berapa?"
    assert dispatcher.sent == [("628123", "Kami buka jam 08:00 sampai 17:00")]

    assert len(log_queue.records) == 1
    record = log_queue.records[0]
    assert record.client_id == "c1"
    assert record.sender_id == "628123"
    assert record.request_text == "Jam buka jam berapa?"
    assert record.response_text == "Kami buka jam 08:00 sampai 17:00"


def test_second_message_within_cooldown_is_dropped():
    clock = FakeClock()
    resolver = FakeResolver()
    dispatcher = FakeDispatcher()
    engine = make_engine(resolver=resolver, dispatcher=dispatcher, clock=clock)

    async def scenario():
        first = await engine.handle_event(event())
        clock.now += 1.0
        second = await engine.handle_event(event("halo lagi"))
        return first, second

    first, second = asyncio.run(scenario())

    assert first is EventOutcome.SENT
    assert second is EventOutcome.DROPPED
    assert resolver.calls == ["628123"]
    assert len(dispatcher.sent) == 1


def test_empty_text_is_ignored():
    resolver = FakeResolver()
    engine = make_engine(resolver=resolver)
    assert asyncio.run(engine.handle_event(event("   "))) is EventOutcome.IGNORED
    assert resolver.calls == []


def test_tenant_failure_sends_apology_without_generation():
    provider = FakeProvider()
    knowledge = FakeKnowledge()
    dispatcher = FakeDispatcher()
    log_queue = FakeLogQueue()
    engine = make_engine(
        resolver=FakeResolver(error=TenantResolutionError("no active client found")),
        knowledge=knowledge,
        provider=provider,
        dispatcher=dispatcher,
        log_queue=log_queue,
    )

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.TENANT_FAILED
    assert dispatcher.sent == [("628123", APOLOGY_MESSAGE)]
    assert knowledge.calls == []
    assert provider.calls == []
    assert log_queue.records == []


def test_retrieval_failure_sends_apology():
    provider = FakeProvider()
    dispatcher = FakeDispatcher()
    log_queue = FakeLogQueue()
    engine = make_engine(
        knowledge=FakeKnowledge(error=RetrievalError("tenant not found: c1")),
        provider=provider,
        dispatcher=dispatcher,
        log_queue=log_queue,
    )

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.RETRIEVAL_FAILED
    assert dispatcher.sent == [("628123", APOLOGY_MESSAGE)]
    assert provider.calls == []
    assert log_queue.records == []


def test_generation_error_sends_fallback_and_logs_it():
    dispatcher = FakeDispatcher()
    log_queue = FakeLogQueue()
    engine = make_engine(
        provider=FakeProvider(error=GenerationError("openai error: 500")),
        dispatcher=dispatcher,
        log_queue=log_queue,
    )

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.SENT
    assert dispatcher.sent == [("628123", FALLBACK_REPLY)]
    assert log_queue.records[0].response_text == FALLBACK_REPLY


def test_generation_timeout_cancels_provider_and_sends_fallback():
    provider = FakeProvider(delay=5.0)
    dispatcher = FakeDispatcher()
    engine = make_engine(provider=provider, dispatcher=dispatcher, timeout=0.05)

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.SENT
    assert dispatcher.sent == [("628123", FALLBACK_REPLY)]
    assert provider.cancelled is True


def test_malformed_provider_body_sends_fallback():
    def handler(request):
        return httpx.Response(200, json={"content": ["oops"]})

    dispatcher = FakeDispatcher()
    log_queue = FakeLogQueue()
    provider = ClaudeProvider("sk-ant", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    engine = make_engine(provider=provider, dispatcher=dispatcher, log_queue=log_queue)

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.SENT
    assert dispatcher.sent == [("628123", FALLBACK_REPLY)]
    assert log_queue.records[0].response_text == FALLBACK_REPLY


def test_unexpected_provider_exception_sends_fallback():
    dispatcher = FakeDispatcher()
    engine = make_engine(provider=FakeProvider(error=TypeError("NoneType is not subscriptable")), dispatcher=dispatcher)

    assert asyncio.run(engine.handle_event(event())) is EventOutcome.SENT
    assert dispatcher.sent == [("628123", FALLBACK_REPLY)]


def test_empty_generation_sends_fallback():
    dispatcher = FakeDispatcher()
    engine = make_engine(provider=FakeProvider(reply="  "), dispatcher=dispatcher)

    asyncio.run(engine.handle_event(event()))

    assert dispatcher.sent == [("628123", FALLBACK_REPLY)]


def test_dispatch_failure_writes_no_log():
    log_queue = FakeLogQueue()
    engine = make_engine(dispatcher=FakeDispatcher(error=DispatchError("waha returned 500")), log_queue=log_queue)

    outcome = asyncio.run(engine.handle_event(event()))

    assert outcome is EventOutcome.DISPATCH_FAILED
    assert log_queue.records == []


def test_apology_dispatch_failure_is_contained():
    engine = make_engine(
        resolver=FakeResolver(error=TenantResolutionError("db down")),
        dispatcher=FakeDispatcher(error=DispatchError("offline")),
    )
    assert asyncio.run(engine.handle_event(event())) is EventOutcome.TENANT_FAILED


def test_pending_and_unknown_modules_use_generic_handler():
    for module in ("farmasi", "umkm", "retail"):
        tenant = TenantContext(module=module, role="customer", company_id="c1", client_id="c1")
        dispatcher = FakeDispatcher()
        engine = make_engine(resolver=FakeResolver(tenant=tenant), dispatcher=dispatcher)

        assert asyncio.run(engine.handle_event(event())) is EventOutcome.SENT
        assert len(dispatcher.sent) == 1

    engine = make_engine()
    assert engine.handler_for("retail") == engine.handler_for(DEFAULT_MODULE)


def test_engine_with_real_log_queue():
    written = []
    dispatcher = FakeDispatcher()

    async def scenario():
        log_queue = ConversationLogQueue(written.append, maxsize=10, workers=2)
        log_queue.start()
        engine = make_engine(dispatcher=dispatcher, log_queue=log_queue)
        outcome = await engine.handle_event(event())
        await log_queue.stop(timeout=1.0)
        return outcome

    assert asyncio.run(scenario()) is EventOutcome.SENT
    assert len(written) == 1
    assert written[0].client_id == "c1"


if __name__ == "__main__":
    test_happy_path_sends_reply_and_logs()
    test_second_message_within_cooldown_is_dropped()
    test_tenant_failure_sends_apology_without_generation()
    test_generation_timeout_cancels_provider_and_sends_fallback()
    test_dispatch_failure_writes_no_log()
    print("✅ Engine tests passed")
