"""
Runtime configuration for the UXDoctor analysis service.

This module centralizes environment-driven configuration, feature flags,
resource bounds, and LLM provider settings. It defines whether the LLM
augmentation step runs and how the providers are reached.

Configuration is read-only at runtime and must not influence the
deterministic rule engine beyond the explicit knobs declared here.
"""

from __future__ import annotations

import os

from pydantic import (
    BaseModel,
    Field,
    field_validator,
    model_validator,
    ValidationInfo,
)


class UXDoctorConfig(BaseModel):
    """
    Runtime configuration for the UXDoctor analysis service.

    Configuration is environment-driven, read-only at runtime, and parsed
    once at startup.
    """

    # ------------------------------------------------------------------
    # Core execution gates
    # ------------------------------------------------------------------

    ENABLE_LLM_AUGMENTATION: bool = Field(
        False,
        description="Enable LLM enrichment of rule-engine findings",
    )

    REQUIRED_FIELD_DETECTION: str = Field(
        "attribute",
        description=(
            "Required-field detection mode: 'attribute' inspects the "
            "required / aria-required attributes, 'dom_path_marker' keeps "
            "the legacy '*' in dom_path heuristic."
        ),
    )

    # ------------------------------------------------------------------
    # Safety and resource limits
    # ------------------------------------------------------------------

    MAX_SCHEMA_ELEMENTS: int = Field(
        100,
        ge=1,
        description="Maximum number of schema elements sent downstream",
    )

    MAX_PROMPT_ISSUES: int = Field(
        50,
        ge=0,
        description="Maximum number of raw issues embedded in the LLM prompt",
    )

    MAX_TEXT_LENGTH: int = Field(
        100,
        ge=1,
        description="Maximum length of extracted element text",
    )

    MAX_SNAPSHOT_NODES: int = Field(
        20_000,
        ge=1,
        description="Upper bound on DOM nodes accepted per snapshot",
    )

    CACHE_TTL_SECONDS: int = Field(
        1800,
        ge=0,
        description="Lifetime of cached analysis reports (0 disables caching)",
    )

    # ------------------------------------------------------------------
    # LLM provider configuration
    # ------------------------------------------------------------------

    PRIMARY_LLM_PROVIDER: str = Field(
        "openai",
        description="Provider tried first; the other one is the fallback",
    )

    OPENAI_API_KEY: str = Field(
        "",
        description="OpenAI API key",
    )

    OPENAI_MODEL: str = Field(
        "gpt-3.5-turbo",
        description="OpenAI chat model",
    )

    OPENAI_BASE_URL: str = Field(
        "https://api.openai.com/v1",
        description="OpenAI-compatible API base URL",
    )

    DEEPSEEK_API_KEY: str = Field(
        "",
        description="DeepSeek API key",
    )

    DEEPSEEK_MODEL: str = Field(
        "deepseek-chat",
        description="DeepSeek chat model",
    )

    DEEPSEEK_BASE_URL: str = Field(
        "https://api.deepseek.com/v1",
        description="DeepSeek OpenAI-compatible API base URL",
    )

    LLM_TIMEOUT_SECONDS: float = Field(
        60.0,
        gt=0,
        description="Per-request timeout for LLM calls",
    )

    LLM_TEMPERATURE: float = Field(
        0.7,
        ge=0,
        le=2,
        description="Sampling temperature for LLM calls",
    )

    LLM_MAX_TOKENS: int = Field(
        2000,
        ge=1,
        description="Completion token limit for LLM calls",
    )

    LLM_MAX_ATTEMPTS: int = Field(
        2,
        ge=1,
        description="Attempts per provider on transient connection errors",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("REQUIRED_FIELD_DETECTION")
    @classmethod
    def validate_required_field_detection(cls, v: str) -> str:
        allowed = {"attribute", "dom_path_marker"}
        if v not in allowed:
            raise ValueError(
                f"Unsupported REQUIRED_FIELD_DETECTION '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return v

    @field_validator("PRIMARY_LLM_PROVIDER")
    @classmethod
    def validate_primary_provider(cls, v: str) -> str:
        allowed = {"openai", "deepseek"}
        if v not in allowed:
            raise ValueError(
                f"Unsupported PRIMARY_LLM_PROVIDER '{v}'. "
                f"Allowed values: {sorted(allowed)}"
            )
        return v

    @field_validator("LLM_MAX_TOKENS")
    @classmethod
    def max_tokens_requires_augmentation_budget(
        cls, v: int, info: ValidationInfo
    ) -> int:
        if v < 256 and info.data.get("ENABLE_LLM_AUGMENTATION"):
            raise ValueError(
                "LLM_MAX_TOKENS must be at least 256 when "
                "ENABLE_LLM_AUGMENTATION is true."
            )
        return v

    @model_validator(mode="after")
    def augmentation_requires_a_key(self) -> "UXDoctorConfig":
        if self.ENABLE_LLM_AUGMENTATION and not (
            self.OPENAI_API_KEY or self.DEEPSEEK_API_KEY
        ):
            raise ValueError(
                "ENABLE_LLM_AUGMENTATION is true but neither "
                "OPENAI_API_KEY nor DEEPSEEK_API_KEY is configured."
            )
        return self

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "UXDoctorConfig":
        """
        Load configuration from environment variables.

        All values are parsed once at startup and must remain immutable.
        """

        def env_bool(name: str, default: bool) -> bool:
            raw = os.getenv(name)
            if raw is None:
                return default
            return raw.lower() in {"1", "true", "yes", "on"}

        return cls(
            ENABLE_LLM_AUGMENTATION=env_bool(
                "UXDOCTOR_ENABLE_LLM_AUGMENTATION", False
            ),
            REQUIRED_FIELD_DETECTION=os.getenv(
                "UXDOCTOR_REQUIRED_FIELD_DETECTION", "attribute"
            ),
            MAX_SCHEMA_ELEMENTS=int(
                os.getenv("UXDOCTOR_MAX_SCHEMA_ELEMENTS", "100")
            ),
            MAX_PROMPT_ISSUES=int(
                os.getenv("UXDOCTOR_MAX_PROMPT_ISSUES", "50")
            ),
            MAX_TEXT_LENGTH=int(
                os.getenv("UXDOCTOR_MAX_TEXT_LENGTH", "100")
            ),
            MAX_SNAPSHOT_NODES=int(
                os.getenv("UXDOCTOR_MAX_SNAPSHOT_NODES", "20000")
            ),
            CACHE_TTL_SECONDS=int(
                os.getenv("UXDOCTOR_CACHE_TTL_SECONDS", "1800")
            ),
            PRIMARY_LLM_PROVIDER=os.getenv(
                "UXDOCTOR_PRIMARY_LLM_PROVIDER", "openai"
            ),
            OPENAI_API_KEY=os.getenv("OPENAI_API_KEY", ""),
            OPENAI_MODEL=os.getenv(
                "UXDOCTOR_OPENAI_MODEL", "gpt-3.5-turbo"
            ),
            OPENAI_BASE_URL=os.getenv(
                "UXDOCTOR_OPENAI_BASE_URL", "https://api.openai.com/v1"
            ),
            DEEPSEEK_API_KEY=os.getenv("DEEPSEEK_API_KEY", ""),
            DEEPSEEK_MODEL=os.getenv(
                "UXDOCTOR_DEEPSEEK_MODEL", "deepseek-chat"
            ),
            DEEPSEEK_BASE_URL=os.getenv(
                "UXDOCTOR_DEEPSEEK_BASE_URL", "https://api.deepseek.com/v1"
            ),
            LLM_TIMEOUT_SECONDS=float(
                os.getenv("UXDOCTOR_LLM_TIMEOUT_SECONDS", "60")
            ),
            LLM_TEMPERATURE=float(
                os.getenv("UXDOCTOR_LLM_TEMPERATURE", "0.7")
            ),
            LLM_MAX_TOKENS=int(
                os.getenv("UXDOCTOR_LLM_MAX_TOKENS", "2000")
            ),
            LLM_MAX_ATTEMPTS=int(
                os.getenv("UXDOCTOR_LLM_MAX_ATTEMPTS", "2")
            ),
        )

    model_config = {
        "frozen": True,
    }
