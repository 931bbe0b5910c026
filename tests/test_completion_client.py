# tests/test_completion_client.py
import httpx
import pytest

from services.llm.completion_client import GENERATION_OPTIONS
from services.llm.prompts import SMOKE_TEST_PROMPT


# -------------------------------------------------------------------
# 1️⃣  Retry policy
# -------------------------------------------------------------------
@pytest.mark.asyncio
async def test_two_failures_then_success_makes_three_attempts(make_client, fake_ollama, sleeps):
    """
    A 500 followed by a transport error is retried; the third answer is
    returned and the waits grow linearly (1s, then 2s).
    """
    fake_ollama.replies = [500, httpx.ConnectError("connection refused"), "third time lucky"]
    client = make_client()

    assert await client.generate("hi") == "third time lucky"
    assert len(fake_ollama.generate_calls) == 3
    assert sleeps == [1.0, 2.0]
    assert sleeps[0] < sleeps[1]


@pytest.mark.asyncio
async def test_exhausted_retries_return_none(make_client, fake_ollama, sleeps):
    fake_ollama.replies = [503, 503, 503, "never reached"]
    client = make_client()

    assert await client.generate("hi") is None
    assert len(fake_ollama.generate_calls) == 3
    assert sleeps == [1.0, 2.0]


@pytest.mark.asyncio
async def test_payload_without_response_field_is_retried(make_client, fake_ollama):
    fake_ollama.replies = [{"done": True}, "fine"]
    client = make_client()

    assert await client.generate("hi") == "fine"
    assert len(fake_ollama.generate_calls) == 2


@pytest.mark.asyncio
async def test_retry_delay_follows_configuration(make_client, fake_ollama, sleeps):
    fake_ollama.replies = [500, 500, 500, 500]
    client = make_client(retry_attempts=4, retry_delay=0.5)

    assert await client.generate("hi") is None
    assert sleeps == [0.5, 1.0, 1.5]


# -------------------------------------------------------------------
# 2️⃣  Request shape
# -------------------------------------------------------------------
@pytest.mark.asyncio
async def test_request_carries_fixed_sampling_options(make_client, fake_ollama):
    client = make_client()
    await client.generate("What is this page about?")

    body = fake_ollama.generate_calls[0]
    assert body["model"] == "llama2:latest"
    assert body["prompt"] == "What is this page about?"
    assert body["stream"] is False
    assert body["options"] == {
        "temperature": 0.5,
        "top_k": 50,
        "top_p": 0.95,
        "num_predict": 2048,
        "stop": ["</response>"],
        "repeat_penalty": 1.1,
        "presence_penalty": 0.5,
    }
    assert body["options"] == GENERATION_OPTIONS


# -------------------------------------------------------------------
# 3️⃣  Readiness
# -------------------------------------------------------------------
@pytest.mark.asyncio
async def test_not_ready_short_circuits(make_client, fake_ollama):
    client = make_client(ready=False)

    assert await client.generate("hi") is None
    assert fake_ollama.generate_calls == []


@pytest.mark.asyncio
async def test_initialize_success(make_client, fake_ollama):
    client = make_client(ready=False)

    assert await client.initialize() is True
    assert client.ready is True
    assert fake_ollama.prompts == [SMOKE_TEST_PROMPT]


@pytest.mark.asyncio
async def test_initialize_fails_when_model_missing(make_client, fake_ollama):
    fake_ollama.models = ["mistral:latest"]
    client = make_client(ready=False)

    assert await client.initialize() is False
    assert client.ready is False
    assert fake_ollama.generate_calls == []


@pytest.mark.asyncio
async def test_initialize_fails_when_endpoint_down(make_client, fake_ollama):
    fake_ollama.tags_status = 500
    client = make_client(ready=False)

    assert await client.initialize() is False
    assert await client.generate("hi") is None


@pytest.mark.parametrize("body", [[], ["llama3"], "models", 3, {"models": 5}, {}])
@pytest.mark.asyncio
async def test_initialize_fails_when_tags_body_is_not_an_object(make_client, fake_ollama, body):
    fake_ollama.tags_body = body
    client = make_client(ready=False)

    assert await client.list_models() == []
    assert await client.initialize() is False
    assert fake_ollama.generate_calls == []


@pytest.mark.asyncio
async def test_initialize_fails_on_bad_smoke_test(make_client, fake_ollama):
    """A reply without "OK" leaves the client unusable for later calls."""
    fake_ollama.responder = lambda body: "I cannot help with that."
    client = make_client(ready=False)

    assert await client.initialize() is False
    calls_after_init = len(fake_ollama.generate_calls)
    assert await client.generate("hi") is None
    assert len(fake_ollama.generate_calls) == calls_after_init


@pytest.mark.asyncio
async def test_initialize_reset_after_previous_success(make_client, fake_ollama):
    client = make_client(ready=False)
    assert await client.initialize() is True

    fake_ollama.models = []
    assert await client.initialize() is False
    assert client.ready is False
