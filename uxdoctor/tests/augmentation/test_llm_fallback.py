from types import SimpleNamespace

import httpx
import openai
import pytest
from tenacity import wait_none

from uxdoctor.app.augmentation import (
    FallbackLLMClient,
    OpenAICompatibleClient,
    build_llm_client,
)
from uxdoctor.app.config import UXDoctorConfig
from uxdoctor.app.errors import (
    InsufficientBalanceError,
    LLMError,
    LLMNotConfiguredError,
    LLMUnavailableError,
)
from uxdoctor.tests.augmentation.mock_llm_client import MockChatClient

pytestmark = pytest.mark.anyio


REQUEST = httpx.Request("POST", "https://llm.example.com/v1/chat/completions")


def _status_error(status_code: int) -> openai.APIStatusError:
    return openai.APIStatusError(
        f"HTTP {status_code}",
        response=httpx.Response(status_code, request=REQUEST),
        body=None,
    )


class FakeCompletions:
    """Stands in for AsyncOpenAI().chat.completions."""

    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=outcome))]
        )


def _openai_client(*outcomes, max_attempts: int = 2):
    completions = FakeCompletions(outcomes)
    client = OpenAICompatibleClient(
        name="openai",
        api_key="sk-test",
        model="gpt-test",
        max_attempts=max_attempts,
        retry_wait=wait_none(),
        client=SimpleNamespace(chat=SimpleNamespace(completions=completions)),
    )
    return client, completions


# ---------------------------------------------------------------------------
# Primary / fallback policy
# ---------------------------------------------------------------------------

async def test_primary_success_skips_fallback():
    primary = MockChatClient("openai", text='{"issues": []}')
    fallback = MockChatClient("deepseek")

    completion = await FallbackLLMClient(primary, fallback).complete("prompt")

    assert completion.text == '{"issues": []}'
    assert completion.model == "openai:mock-model"
    assert fallback.calls == 0


async def test_failed_primary_falls_back():
    primary = MockChatClient("openai", errors=[LLMError("boom")])
    fallback = MockChatClient("deepseek", text="[]")

    completion = await FallbackLLMClient(primary, fallback).complete("prompt")

    assert completion.model == "deepseek:mock-model"
    assert primary.calls == 1
    assert fallback.calls == 1


async def test_insufficient_balance_aborts_without_fallback():
    primary = MockChatClient("openai", errors=[InsufficientBalanceError("openai")])
    fallback = MockChatClient("deepseek")

    with pytest.raises(InsufficientBalanceError) as excinfo:
        await FallbackLLMClient(primary, fallback).complete("prompt")

    assert excinfo.value.provider == "openai"
    assert fallback.calls == 0


async def test_all_providers_failing_aggregates_errors():
    primary = MockChatClient("openai", errors=[LLMError("primary down")])
    fallback = MockChatClient(
        "deepseek", errors=[httpx.ConnectError("no route", request=REQUEST)]
    )

    with pytest.raises(LLMUnavailableError) as excinfo:
        await FallbackLLMClient(primary, fallback).complete("prompt")

    assert [name for name, _ in excinfo.value.errors] == ["openai", "deepseek"]
    assert "primary down" in str(excinfo.value)


async def test_single_provider_failure_is_unavailable():
    primary = MockChatClient("openai", errors=[LLMError("down")])

    with pytest.raises(LLMUnavailableError):
        await FallbackLLMClient(primary).complete("prompt")


# ---------------------------------------------------------------------------
# OpenAI-compatible provider
# ---------------------------------------------------------------------------

async def test_completion_text_is_stripped():
    client, completions = _openai_client("  [ ]  ")

    assert await client.complete("prompt") == "[ ]"
    assert completions.calls[0]["model"] == "gpt-test"
    assert completions.calls[0]["messages"] == [
        {"role": "user", "content": "prompt"}
    ]


async def test_payment_required_becomes_insufficient_balance():
    client, _ = _openai_client(_status_error(402))

    with pytest.raises(InsufficientBalanceError):
        await client.complete("prompt")


async def test_other_status_errors_propagate_for_fallback():
    client, completions = _openai_client(_status_error(500))

    with pytest.raises(openai.APIStatusError):
        await client.complete("prompt")

    assert len(completions.calls) == 1


async def test_transient_connection_errors_are_retried():
    client, completions = _openai_client(
        openai.APIConnectionError(request=REQUEST),
        "[]",
    )

    assert await client.complete("prompt") == "[]"
    assert len(completions.calls) == 2


async def test_retry_budget_is_bounded():
    client, completions = _openai_client(
        openai.APIConnectionError(request=REQUEST),
        openai.APIConnectionError(request=REQUEST),
        "[]",
    )

    with pytest.raises(openai.APIConnectionError):
        await client.complete("prompt")

    assert len(completions.calls) == 2


async def test_empty_completion_is_an_error():
    client, _ = _openai_client("   ")

    with pytest.raises(LLMError):
        await client.complete("prompt")


def test_max_attempts_must_be_positive():
    with pytest.raises(ValueError):
        OpenAICompatibleClient(
            name="openai",
            api_key="sk-test",
            model="gpt-test",
            max_attempts=0,
            client=SimpleNamespace(),
        )


# ---------------------------------------------------------------------------
# Composition from configuration
# ---------------------------------------------------------------------------

def test_no_keys_means_not_configured():
    with pytest.raises(LLMNotConfiguredError):
        build_llm_client(UXDoctorConfig())


def test_single_key_builds_single_provider():
    client = build_llm_client(UXDoctorConfig(DEEPSEEK_API_KEY="ds-test"))

    assert [p.name for p in client.providers] == ["deepseek"]


def test_primary_provider_is_configurable():
    config = UXDoctorConfig(
        OPENAI_API_KEY="sk-test",
        DEEPSEEK_API_KEY="ds-test",
        PRIMARY_LLM_PROVIDER="deepseek",
    )

    client = build_llm_client(config)

    assert [p.name for p in client.providers] == ["deepseek", "openai"]
    assert client.providers[0].model == "deepseek-chat"
