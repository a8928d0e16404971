from __future__ import annotations

import logging
from typing import Optional

from a11y_audit.app.config import A11yAuditConfig
from a11y_audit.app.fixes.generator import FixGenerator
from a11y_audit.app.fixes.heuristic import HeuristicFixGenerator
from a11y_audit.app.fixes.llm_generator import DEFAULT_MODEL, LLMFixGenerator

logger = logging.getLogger(__name__)


def build_fix_generator(config: A11yAuditConfig) -> Optional[FixGenerator]:
    """
    Construct the configured fix generator, or None when disabled.
    """
    provider = config.FIX_GENERATOR_PROVIDER
    model = config.FIX_GENERATOR_MODEL or DEFAULT_MODEL
    timeout = config.FIX_GENERATION_TIMEOUT_SECONDS

    if provider == "disabled":
        logger.info("Fix generation disabled")
        return None

    if provider == "heuristic":
        logger.info("Using heuristic fix generator")
        return HeuristicFixGenerator()

    if provider == "openai":
        logger.info("Using OpenAI fix generator (model=%s)", model)
        return LLMFixGenerator.from_openai(
            model=model,
            base_url=config.OPENAI_BASE_URL or None,
            timeout_seconds=timeout,
        )

    if provider == "azure_openai":
        logger.info("Using Azure OpenAI fix generator (deployment=%s)", model)
        return LLMFixGenerator.from_azure(
            endpoint=config.AZURE_OPENAI_ENDPOINT,
            deployment=model,
            api_version=config.AZURE_OPENAI_API_VERSION or "2024-06-01",
            timeout_seconds=timeout,
        )

    raise ValueError(f"Unsupported fix generator provider: {provider}")
