"""
Exception taxonomy for UXDoctor.

The deterministic core (normalizer, rule engine, sanity checker, scoring)
does not raise for data-shape reasons. Exceptions are reserved for:
- programmer errors (wrong argument types), raised as TypeError
- LLM augmentation failures, raised by provider clients and normalized
  into AugmentationResult diagnostics by the augmenter
"""

from __future__ import annotations

from typing import Sequence


class UXDoctorError(Exception):
    """Base class for all UXDoctor errors."""


class ResponseParseError(UXDoctorError):
    """
    Raised when free-text LLM output cannot be parsed as JSON by any
    extraction strategy (direct, fenced code block, brace matching).
    """


class LLMError(UXDoctorError):
    """Base class for LLM provider failures."""


class LLMNotConfiguredError(LLMError):
    """Raised when no provider has credentials configured."""


class InsufficientBalanceError(LLMError):
    """
    Raised when a provider reports an exhausted account balance (HTTP 402).

    This condition aborts the call immediately: retrying another provider
    would hide a billing problem behind a degraded result.
    """

    def __init__(self, provider: str, message: str = "") -> None:
        self.provider = provider
        super().__init__(
            message
            or f"{provider} account balance is insufficient; top up and retry"
        )


class LLMUnavailableError(LLMError):
    """
    Raised when every configured provider failed.

    Carries the individual provider errors in attempt order.
    """

    def __init__(self, errors: Sequence[tuple[str, BaseException]]) -> None:
        self.errors = list(errors)
        detail = "; ".join(
            f"{provider}: {type(exc).__name__}: {exc}"
            for provider, exc in self.errors
        )
        super().__init__(
            f"All LLM providers are unavailable ({detail or 'no attempts'})"
        )
