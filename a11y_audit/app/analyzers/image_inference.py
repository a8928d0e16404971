"""
Image-inference analyzer.

Extracted text carries no image objects, only references to them
("Figure 3", "the chart below", "photo"). Each reference is treated as
one probable image. Classification is deterministic and driven by the
reference kind and the words around it.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from a11y_audit.app.analyzers.base import BaseAnalyzer, FixPlan
from a11y_audit.app.analyzers.text_utils import page_for_offset
from a11y_audit.app.fixes.generator import FixRequest
from a11y_audit.app.schemas.context import AnalysisContext
from a11y_audit.app.schemas.issues import Issue, IssueCategory, Severity

logger = logging.getLogger(__name__)


MAX_IMAGES = 10
CONTEXT_WORDS = 20

IMAGE_REFERENCE_PATTERNS = (
    ("figure", re.compile(r"\bfigure\s*\d+", re.IGNORECASE)),
    ("chart", re.compile(r"\bchart\s*\d+", re.IGNORECASE)),
    ("diagram", re.compile(r"\bdiagrams?\b", re.IGNORECASE)),
    ("illustration", re.compile(r"\billustrations?\b", re.IGNORECASE)),
    ("photo", re.compile(r"\bphoto(?:graph)?s?\b", re.IGNORECASE)),
    ("image", re.compile(r"\bimages?\b", re.IGNORECASE)),
)

PRIMARY_KINDS = frozenset({"figure", "chart", "diagram", "illustration"})
COMPLEX_KINDS = frozenset({"chart", "diagram"})

DECORATIVE_WORDS = ("logo", "decorative", "ornament", "border", "background", "watermark")
COMPLEX_CONTEXT_WORDS = ("graph", "flowchart", "data")

MAX_CAPTION_CHARS = 120
_INLINE_CAPTION = re.compile(r"[ \t]*(?::|[ \t]-)[ \t]*([^\n]{3,})")


class ImageReference(BaseModel):
    index: int
    kind: str
    reference: str = Field(..., description="Matched reference text, e.g. 'Figure 2'")
    position: int
    page: int
    context_text: str
    existing_alt_text: Optional[str] = Field(
        None,
        description="Inline caption following the reference, e.g. 'Figure 2: Site map'",
    )
    is_decorative: bool
    is_primary_content: bool
    is_complex: bool

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def needs_alt_text(self) -> bool:
        return not self.is_decorative and not self.existing_alt_text


class ImageAnalysis(BaseModel):
    images: List[ImageReference] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def images_without_alt_text(self) -> List[ImageReference]:
        return [image for image in self.images if image.needs_alt_text]

    @property
    def decorative_with_alt_text(self) -> List[ImageReference]:
        return [
            image for image in self.images
            if image.is_decorative and image.existing_alt_text
        ]

    @property
    def complex_images(self) -> List[ImageReference]:
        return [image for image in self.images if image.is_complex]


# ----------------------------------------------------------------------
# Detection helpers
# ----------------------------------------------------------------------

def word_window(text: str, start: int, end: int, words: int = CONTEXT_WORDS) -> str:
    before = text[:start].split()[-words:]
    after = text[end:].split()[:words]
    return " ".join(before + [text[start:end]] + after)


def inline_caption(text: str, end: int) -> Optional[str]:
    """Caption written right after a reference, as in 'Figure 2: Site map'."""
    match = _INLINE_CAPTION.match(text, end)
    if match is None:
        return None
    caption = match.group(1).strip().rstrip(".")[:MAX_CAPTION_CHARS]
    return caption or None


def estimate_page(position: int, text_length: int, page_count: int) -> int:
    if page_count > 0 and text_length > 0:
        return min(page_count, position * page_count // text_length + 1)
    return page_for_offset(position)


def find_image_references(context: AnalysisContext) -> List[ImageReference]:
    text = context.text
    matches = []
    for kind, pattern in IMAGE_REFERENCE_PATTERNS:
        for match in pattern.finditer(text):
            matches.append((match.start(), match.end(), kind))

    matches.sort(key=lambda item: item[0])

    references: List[ImageReference] = []
    for start, end, kind in matches[:MAX_IMAGES]:
        surrounding = word_window(text, start, end)
        lowered = surrounding.lower()

        decorative = any(word in lowered for word in DECORATIVE_WORDS)
        primary = kind in PRIMARY_KINDS and not decorative
        complex_image = primary and (
            kind in COMPLEX_KINDS
            or any(word in lowered for word in COMPLEX_CONTEXT_WORDS)
        )

        references.append(
            ImageReference(
                index=len(references),
                kind=kind,
                reference=text[start:end],
                position=start,
                page=estimate_page(start, len(text), context.page_count),
                context_text=surrounding,
                existing_alt_text=inline_caption(text, end),
                is_decorative=decorative,
                is_primary_content=primary,
                is_complex=complex_image,
            )
        )

    return references


# ----------------------------------------------------------------------
# Analyzer
# ----------------------------------------------------------------------

class ImageInferenceAnalyzer(BaseAnalyzer):
    name = "image_alttext"
    description = (
        "Infers referenced images and checks for missing or inadequate "
        "alternative text"
    )
    rule_ids = ("1.1.1", "1.4.5", "1.4.9")

    def eligible(self, context: AnalysisContext) -> bool:
        return context.has_images

    def analyze(self, context: AnalysisContext) -> ImageAnalysis:
        analysis = ImageAnalysis(images=find_image_references(context))
        logger.debug(
            "Inferred %s image references (%s decorative with a caption)",
            len(analysis.images),
            len(analysis.decorative_with_alt_text),
        )
        return analysis

    def identify_issues(
        self,
        analysis: ImageAnalysis,
        context: AnalysisContext,
    ) -> Iterable[Issue]:
        decorative_with_caption = analysis.decorative_with_alt_text

        for image in analysis.images:
            location = f"Page {image.page}"

            if image.needs_alt_text:
                yield Issue(
                    category=IssueCategory.MISSING_ALT_TEXT,
                    severity=(
                        Severity.HIGH if image.is_primary_content else Severity.MEDIUM
                    ),
                    description=(
                        f"Image {image.number} on page {image.page} lacks "
                        "alt-text description"
                    ),
                    location=location,
                    rule_ids=["1.1.1"],
                    suggestion=(
                        "Add descriptive alt-text that conveys the image's "
                        "purpose and content"
                        if image.is_primary_content
                        else "Add brief alt-text or mark as decorative if "
                        "purely visual"
                    ),
                )

            if image in decorative_with_caption:
                yield Issue(
                    category=IssueCategory.MISSING_ALT_TEXT,
                    severity=Severity.LOW,
                    description=(
                        f"Image {image.number} appears decorative but has alt-text"
                    ),
                    location=location,
                    rule_ids=["1.1.1"],
                    suggestion=(
                        'Consider marking decorative images with empty '
                        'alt-text (alt="")'
                    ),
                )

            if image.is_complex:
                yield Issue(
                    category=IssueCategory.MISSING_ALT_TEXT,
                    severity=Severity.MEDIUM,
                    description=(
                        f"Complex image {image.number} may need extended description"
                    ),
                    location=location,
                    rule_ids=["1.1.1"],
                    suggestion=(
                        "Complex images like charts or diagrams may need "
                        "detailed descriptions beyond alt-text"
                    ),
                )

    def plan_fixes(
        self,
        analysis: ImageAnalysis,
        issues: List[Issue],
        context: AnalysisContext,
    ) -> Iterable[FixPlan]:
        by_description = {issue.description: issue for issue in issues}

        for image in analysis.images_without_alt_text:
            yield FixPlan(
                request=FixRequest(
                    analyzer_name=self.name,
                    kind="alt_text_generation",
                    issue=by_description.get(
                        f"Image {image.number} on page {image.page} lacks "
                        "alt-text description"
                    ),
                    subject=image.reference,
                    hints={
                        "image_kind": image.kind,
                        "image_number": image.number,
                        "page": image.page,
                        "context": image.context_text,
                        "is_complex": image.is_complex,
                    },
                ),
                description=f"Generated alt-text for image {image.number}",
                rule_ids=["1.1.1"],
                before_value=image.existing_alt_text or "No alt-text",
            )
