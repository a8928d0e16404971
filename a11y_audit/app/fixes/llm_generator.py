"""
Model-backed fix generator.

Sends one chat completion per FixRequest. The prompt is assembled in
three layers:

    1. Authority layer: a static system instruction
    2. Task layer: the instruction for the fix kind
    3. Data layer: the content under remedy plus analyzer hints

Errors are not caught here. The calling analyzer bounds every call
with a timeout and treats any exception as "no fix".
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from azure.identity import (
    DefaultAzureCredential,
    get_bearer_token_provider,
)
from openai import AsyncAzureOpenAI, AsyncOpenAI

from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext

logger = logging.getLogger(__name__)


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 300
AZURE_COGNITIVE_SCOPE = "https://cognitiveservices.azure.com/.default"

SYSTEM_PROMPT = (
    "You are an accessibility remediation assistant for PDF documents. "
    "You propose concise replacement content that satisfies WCAG 2.1. "
    "Reply with the proposed content only: no preamble, no explanation, "
    "no markdown fences."
)

TASK_INSTRUCTIONS: Dict[str, str] = {
    "link_text_improvement": (
        "Write descriptive link text (2 to 8 words) that states the link "
        "destination or purpose. Avoid phrases such as 'click here'."
    ),
    "link_text_uniqueness": (
        "Explain in one sentence how to disambiguate the duplicated link "
        "texts listed below."
    ),
    "table_header_generation": (
        "Propose one header per column for the table sample below. Reply "
        "with the headers separated by ' | '."
    ),
    "table_caption_generation": (
        "Write a one-sentence caption describing the purpose and content "
        "of the table below."
    ),
    "heading_structure_optimization": (
        "Propose a sequential heading outline (H1 to H6, no skipped "
        "levels) for the headings below. One heading per line, formatted "
        "as 'H<level>: <text>'."
    ),
    "heading_uniqueness": (
        "Propose a unique, descriptive alternative for each duplicated "
        "heading below. One per line, formatted as '\"old\" -> \"new\"'."
    ),
    "alt_text_generation": (
        "Write alternative text (at most 125 characters) for the image "
        "referenced below, based on its surrounding text. If the image is "
        "complex, add one sentence suggesting an extended description."
    ),
    "metadata_title": (
        "Write a descriptive document title (at most 100 characters)."
    ),
    "metadata_subject": (
        "Write a one-sentence subject description summarizing the document."
    ),
    "metadata_keywords": (
        "List 5 to 8 relevant keywords for the document, comma separated."
    ),
    "metadata_language": (
        "Reply with the BCP 47 language tag of the document's primary language."
    ),
    "metadata_accessibility": (
        "Describe in one sentence the tagging the document needs to be "
        "accessible to assistive technologies."
    ),
}

DOCUMENT_EXCERPT_CHARS = 1500


def build_messages(request: FixRequest, context: AnalysisContext) -> List[Dict[str, str]]:
    task = TASK_INSTRUCTIONS.get(
        request.kind,
        "Propose remedy content for the accessibility issue below.",
    )

    data: Dict[str, Any] = {
        "fix_kind": request.kind,
        "analyzer": request.analyzer_name,
        "document_language": context.language,
        "compliance_level": context.compliance_level.value,
        "subject": request.subject,
        "hints": request.hints,
    }
    if request.issue is not None:
        data["issue"] = {
            "description": request.issue.description,
            "severity": request.issue.severity.value,
            "rule_ids": request.issue.rule_ids,
        }

    payload_json = json.dumps(data, ensure_ascii=False, sort_keys=True, default=str)

    messages = [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": task},
        {
            "role": "user",
            "content": (
                "--- BEGIN CONTENT UNDER REMEDY ---\n"
                f"{payload_json}\n"
                "--- END CONTENT UNDER REMEDY ---"
            ),
        },
    ]

    if request.kind.startswith("metadata_") and context.text:
        messages.append(
            {
                "role": "user",
                "content": (
                    "--- BEGIN DOCUMENT EXCERPT ---\n"
                    f"{context.text[:DOCUMENT_EXCERPT_CHARS]}\n"
                    "--- END DOCUMENT EXCERPT ---"
                ),
            }
        )

    return messages


class LLMFixGenerator:
    """
    FixGenerator backed by an OpenAI-compatible async chat client.

    The client only needs `chat.completions.create(...)`, so tests can
    pass a fake.
    """

    def __init__(
        self,
        client: Any,
        *,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = 0.2,
    ) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model(self) -> str:
        return self._model

    @classmethod
    def from_openai(
        cls,
        *,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        timeout_seconds: float = 30.0,
    ) -> "LLMFixGenerator":
        """
        Build a generator on the public OpenAI API (or a compatible
        endpoint). Reads OPENAI_API_KEY from the environment.
        """
        client = AsyncOpenAI(
            base_url=base_url or None,
            timeout=timeout_seconds,
        )
        return cls(client, model=model)

    @classmethod
    def from_azure(
        cls,
        *,
        endpoint: str,
        deployment: str,
        api_version: str,
        timeout_seconds: float = 30.0,
    ) -> "LLMFixGenerator":
        """
        Build a generator on Azure OpenAI using Entra ID (managed
        identity or developer credentials). No API key is needed.
        """
        credential = DefaultAzureCredential()
        token_provider = get_bearer_token_provider(
            credential,
            AZURE_COGNITIVE_SCOPE,
        )

        client = AsyncAzureOpenAI(
            azure_endpoint=endpoint,
            azure_ad_token_provider=token_provider,
            api_version=api_version,
            timeout=timeout_seconds,
        )
        return cls(client, model=deployment)

    async def generate(self, request: FixRequest, context: AnalysisContext) -> str:
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=build_messages(request, context),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

        usage = getattr(response, "usage", None)
        if usage is not None:
            logger.debug(
                "Fix %s used %s prompt / %s completion tokens",
                request.kind,
                getattr(usage, "prompt_tokens", None),
                getattr(usage, "completion_tokens", None),
            )

        content = response.choices[0].message.content
        return (content or "").strip()
