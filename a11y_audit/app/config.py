"""
Runtime configuration for the accessibility audit service.

This module centralizes environment-driven configuration: analysis
defaults, execution switches, extraction limits and fix-generation
provider settings (heuristic, OpenAI, Azure OpenAI).

Configuration is read-only at runtime. It may change which analyzers
have a fix generator available, never how issues are detected.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from a11y_audit.app.catalog import ComplianceLevel


FIX_GENERATOR_PROVIDERS = {"disabled", "heuristic", "openai", "azure_openai"}
_MODEL_PROVIDERS = {"openai", "azure_openai"}


class A11yAuditConfig(BaseModel):
    """
    Runtime configuration for the accessibility audit service.

    Environment-driven, parsed once at startup and immutable afterwards.
    """

    # ------------------------------------------------------------------
    # Analysis defaults
    # ------------------------------------------------------------------

    DEFAULT_COMPLIANCE_LEVEL: ComplianceLevel = Field(
        ComplianceLevel.AA,
        description="Target compliance level when the caller does not choose one",
    )

    DEFAULT_LANGUAGE: str = Field(
        "en",
        description="Language tag used when neither caller nor document declares one",
    )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    ENABLE_CONCURRENT_EXECUTION: bool = Field(
        True,
        description="Run eligible analyzers concurrently within one invocation",
    )

    ENABLE_EXECUTION_LOG: bool = Field(
        True,
        description="Retain result envelopes for cross-run execution statistics",
    )

    # ------------------------------------------------------------------
    # Extraction limits
    # ------------------------------------------------------------------

    MAX_PDF_SIZE_MB: int = Field(
        20,
        description="Maximum allowed PDF size in megabytes",
    )

    MAX_PAGE_COUNT: int = Field(
        500,
        description="Maximum allowed number of pages in the PDF",
    )

    MAX_TEXT_EXTRACTION_CHARS: int = Field(
        2_000_000,
        description="Upper bound on extracted text handed to analyzers",
    )

    MIN_TEXT_LENGTH: int = Field(
        0,
        description="Minimum extracted characters; 0 accepts text-less documents",
    )

    # ------------------------------------------------------------------
    # Fix generation
    # ------------------------------------------------------------------

    FIX_GENERATOR_PROVIDER: str = Field(
        "disabled",
        description="Fix generator identifier",
    )

    FIX_GENERATOR_MODEL: str = Field(
        "",
        description="Model (or Azure deployment) used for fix generation",
    )

    FIX_GENERATION_TIMEOUT_SECONDS: float = Field(
        15.0,
        description="Upper bound for generating a single fix",
    )

    OPENAI_BASE_URL: str = Field(
        "",
        description="Optional OpenAI-compatible endpoint override",
    )

    AZURE_OPENAI_ENDPOINT: str = Field(
        "",
        description="Azure OpenAI endpoint URL",
        validate_default=True,
    )

    AZURE_OPENAI_API_VERSION: str = Field(
        "",
        description="Azure OpenAI API version",
    )

    # ------------------------------------------------------------------
    # Validators (Pydantic v2)
    # ------------------------------------------------------------------

    @field_validator("MAX_PDF_SIZE_MB", "MAX_PAGE_COUNT", "MAX_TEXT_EXTRACTION_CHARS")
    @classmethod
    def limits_must_be_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v

    @field_validator("MIN_TEXT_LENGTH")
    @classmethod
    def min_text_length_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("MIN_TEXT_LENGTH cannot be negative")
        return v

    @field_validator("FIX_GENERATOR_PROVIDER")
    @classmethod
    def validate_fix_provider(cls, v: str) -> str:
        if v not in FIX_GENERATOR_PROVIDERS:
            raise ValueError(
                f"Unsupported FIX_GENERATOR_PROVIDER '{v}'. "
                f"Allowed values: {sorted(FIX_GENERATOR_PROVIDERS)}"
            )
        return v

    @field_validator("FIX_GENERATOR_MODEL")
    @classmethod
    def model_requires_model_provider(cls, v: str, info: ValidationInfo) -> str:
        if v and info.data.get("FIX_GENERATOR_PROVIDER") not in _MODEL_PROVIDERS:
            raise ValueError(
                "FIX_GENERATOR_MODEL is set but FIX_GENERATOR_PROVIDER is "
                f"not one of {sorted(_MODEL_PROVIDERS)}."
            )
        return v

    @field_validator("FIX_GENERATION_TIMEOUT_SECONDS")
    @classmethod
    def timeout_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("FIX_GENERATION_TIMEOUT_SECONDS must be positive")
        return v

    @field_validator("AZURE_OPENAI_ENDPOINT")
    @classmethod
    def azure_endpoint_required(cls, v: str, info: ValidationInfo) -> str:
        if info.data.get("FIX_GENERATOR_PROVIDER") == "azure_openai" and not v:
            raise ValueError(
                "FIX_GENERATOR_PROVIDER is azure_openai but "
                "AZURE_OPENAI_ENDPOINT is not configured."
            )
        return v

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "A11yAuditConfig":
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
            DEFAULT_COMPLIANCE_LEVEL=os.getenv(
                "A11Y_AUDIT_DEFAULT_COMPLIANCE_LEVEL", "AA"
            ),
            DEFAULT_LANGUAGE=os.getenv(
                "A11Y_AUDIT_DEFAULT_LANGUAGE", "en"
            ),
            ENABLE_CONCURRENT_EXECUTION=env_bool(
                "A11Y_AUDIT_ENABLE_CONCURRENT_EXECUTION", True
            ),
            ENABLE_EXECUTION_LOG=env_bool(
                "A11Y_AUDIT_ENABLE_EXECUTION_LOG", True
            ),
            MAX_PDF_SIZE_MB=int(
                os.getenv("A11Y_AUDIT_MAX_PDF_SIZE_MB", "20")
            ),
            MAX_PAGE_COUNT=int(
                os.getenv("A11Y_AUDIT_MAX_PAGE_COUNT", "500")
            ),
            MAX_TEXT_EXTRACTION_CHARS=int(
                os.getenv("A11Y_AUDIT_MAX_TEXT_EXTRACTION_CHARS", "2000000")
            ),
            MIN_TEXT_LENGTH=int(
                os.getenv("A11Y_AUDIT_MIN_TEXT_LENGTH", "0")
            ),
            FIX_GENERATOR_PROVIDER=os.getenv(
                "A11Y_AUDIT_FIX_GENERATOR_PROVIDER", "disabled"
            ),
            FIX_GENERATOR_MODEL=os.getenv(
                "A11Y_AUDIT_FIX_GENERATOR_MODEL", ""
            ),
            FIX_GENERATION_TIMEOUT_SECONDS=float(
                os.getenv("A11Y_AUDIT_FIX_GENERATION_TIMEOUT_SECONDS", "15")
            ),
            OPENAI_BASE_URL=os.getenv(
                "OPENAI_BASE_URL", ""
            ),
            AZURE_OPENAI_ENDPOINT=os.getenv(
                "AZURE_OPENAI_ENDPOINT", ""
            ),
            AZURE_OPENAI_API_VERSION=os.getenv(
                "AZURE_OPENAI_API_VERSION", ""
            ),
        )

    model_config = {
        "frozen": True,
    }
