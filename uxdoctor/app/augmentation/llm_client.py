"""
LLM provider clients.

OpenAI-compatible chat completion clients (OpenAI, DeepSeek) plus the
primary/fallback policy used by the augmentation step.

Retry and fallback policy:
- transient connection/timeout errors are retried per provider (tenacity)
- HTTP 402 (insufficient balance) aborts immediately, no fallback
- any other provider failure falls back to the secondary provider
- when every provider failed, a single LLMUnavailableError aggregates
  the individual errors
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Tuple

import httpx
import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ConfigDict
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from uxdoctor.app.config import UXDoctorConfig
from uxdoctor.app.errors import (
    InsufficientBalanceError,
    LLMError,
    LLMNotConfiguredError,
    LLMUnavailableError,
)

logger = logging.getLogger(__name__)


PAYMENT_REQUIRED = 402

_TRANSIENT_ERRORS = (openai.APIConnectionError, openai.APITimeoutError)

# Failures that trigger the fallback provider
_PROVIDER_ERRORS = (openai.OpenAIError, LLMError, httpx.HTTPError)


# ----------------------------------------------------------------------
# Interfaces
# ----------------------------------------------------------------------


class LLMCompletion(BaseModel):
    """Text returned by a provider, with the provider/model that produced it."""

    text: str
    model: str

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )


class ChatClient(Protocol):
    """A single provider."""

    name: str
    model: str

    async def complete(self, prompt: str) -> str:
        ...


class LLMClient(Protocol):
    """What the augmenter depends on."""

    async def complete(self, prompt: str) -> LLMCompletion:
        ...


# ----------------------------------------------------------------------
# OpenAI-compatible provider
# ----------------------------------------------------------------------


class OpenAICompatibleClient:
    """
    Chat completion client for any OpenAI-compatible endpoint.

    SDK-level retries are disabled; transient errors are retried here so
    the attempt budget is explicit.
    """

    def __init__(
        self,
        *,
        name: str,
        api_key: str,
        model: str,
        base_url: Optional[str] = None,
        timeout_seconds: float = 60.0,
        temperature: float = 0.7,
        max_tokens: int = 2000,
        max_attempts: int = 2,
        retry_wait: Optional[wait_base] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.name = name
        self.model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._max_attempts = max_attempts
        self._retry_wait = retry_wait or wait_exponential(min=1, max=10)

        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
            http_client=http_client,
        )

    async def complete(self, prompt: str) -> str:
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=self._retry_wait,
                retry=retry_if_exception_type(_TRANSIENT_ERRORS),
                reraise=True,
            ):
                with attempt:
                    response = await self._client.chat.completions.create(
                        model=self.model,
                        messages=[{"role": "user", "content": prompt}],
                        temperature=self._temperature,
                        max_tokens=self._max_tokens,
                    )
        except openai.APIStatusError as exc:
            if exc.status_code == PAYMENT_REQUIRED:
                raise InsufficientBalanceError(self.name) from exc
            raise

        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise LLMError(f"{self.name} returned an empty completion")
        return content.strip()


# ----------------------------------------------------------------------
# Primary / fallback policy
# ----------------------------------------------------------------------


class FallbackLLMClient:
    """Try the primary provider, then the fallback provider."""

    def __init__(
        self,
        primary: ChatClient,
        fallback: Optional[ChatClient] = None,
    ) -> None:
        self._providers: Tuple[ChatClient, ...] = (
            (primary,) if fallback is None else (primary, fallback)
        )

    @property
    def providers(self) -> Tuple[ChatClient, ...]:
        return self._providers

    async def complete(self, prompt: str) -> LLMCompletion:
        errors: List[Tuple[str, BaseException]] = []

        for provider in self._providers:
            try:
                text = await provider.complete(prompt)
            except InsufficientBalanceError:
                logger.error(
                    "%s reports insufficient balance; not falling back",
                    provider.name,
                )
                raise
            except _PROVIDER_ERRORS as exc:
                logger.warning(
                    "%s call failed (%s: %s)",
                    provider.name,
                    type(exc).__name__,
                    exc,
                )
                errors.append((provider.name, exc))
                continue

            if errors:
                logger.info("Fallback provider %s succeeded", provider.name)
            return LLMCompletion(
                text=text,
                model=f"{provider.name}:{provider.model}",
            )

        raise LLMUnavailableError(errors)


# ----------------------------------------------------------------------
# Composition
# ----------------------------------------------------------------------


def build_llm_client(
    config: UXDoctorConfig,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FallbackLLMClient:
    """
    Build the primary/fallback client from configuration.

    Providers without an API key are skipped. Raises LLMNotConfiguredError
    when no provider has a key.
    """
    available = {}

    if config.OPENAI_API_KEY:
        available["openai"] = OpenAICompatibleClient(
            name="openai",
            api_key=config.OPENAI_API_KEY,
            model=config.OPENAI_MODEL,
            base_url=config.OPENAI_BASE_URL,
            timeout_seconds=config.LLM_TIMEOUT_SECONDS,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
            max_attempts=config.LLM_MAX_ATTEMPTS,
            http_client=http_client,
        )

    if config.DEEPSEEK_API_KEY:
        available["deepseek"] = OpenAICompatibleClient(
            name="deepseek",
            api_key=config.DEEPSEEK_API_KEY,
            model=config.DEEPSEEK_MODEL,
            base_url=config.DEEPSEEK_BASE_URL,
            timeout_seconds=config.LLM_TIMEOUT_SECONDS,
            temperature=config.LLM_TEMPERATURE,
            max_tokens=config.LLM_MAX_TOKENS,
            max_attempts=config.LLM_MAX_ATTEMPTS,
            http_client=http_client,
        )

    if not available:
        raise LLMNotConfiguredError(
            "No LLM provider configured; set OPENAI_API_KEY or "
            "DEEPSEEK_API_KEY"
        )

    primary_name = config.PRIMARY_LLM_PROVIDER
    if primary_name not in available:
        primary_name = next(iter(available))

    primary = available.pop(primary_name)
    fallback = next(iter(available.values()), None)

    logger.info(
        "LLM augmentation: primary=%s fallback=%s",
        primary.name,
        fallback.name if fallback is not None else None,
    )
    return FallbackLLMClient(primary, fallback)
