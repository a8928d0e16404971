"""
Versioned accessibility rule catalog.

Every rule identifier an analyzer may raise or improve is declared here.
Issue and Fix models validate their rule references against this table,
so adding a rule to an analyzer without cataloguing it fails fast.

The catalog is immutable for the lifetime of the process.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping

from pydantic import BaseModel, ConfigDict, Field


RULE_CATALOG_VERSION = "wcag-2.1"


class ComplianceLevel(str, Enum):
    """
    Target conformance tier.

    Ordering is intentional: A < AA < AAA.
    """

    A = "A"
    AA = "AA"
    AAA = "AAA"


class RuleDefinition(BaseModel):
    rule_id: str = Field(..., description="Success criterion number, e.g. '1.3.1'")
    name: str
    level: ComplianceLevel
    summary: str

    model_config = ConfigDict(frozen=True, extra="forbid")


def _rule(rule_id: str, name: str, level: ComplianceLevel, summary: str) -> RuleDefinition:
    return RuleDefinition(rule_id=rule_id, name=name, level=level, summary=summary)


_RULES: Dict[str, RuleDefinition] = {
    r.rule_id: r
    for r in (
        _rule("1.1.1", "Non-text Content", ComplianceLevel.A,
              "Provide text alternatives for non-text content."),
        _rule("1.3.1", "Info and Relationships", ComplianceLevel.A,
              "Structure and relationships conveyed visually are available programmatically."),
        _rule("1.3.2", "Meaningful Sequence", ComplianceLevel.A,
              "Reading order preserves the intended meaning."),
        _rule("1.4.5", "Images of Text", ComplianceLevel.AA,
              "Use real text rather than images of text where possible."),
        _rule("1.4.9", "Images of Text (No Exception)", ComplianceLevel.AAA,
              "Images of text are only used for decoration or where essential."),
        _rule("2.4.1", "Bypass Blocks", ComplianceLevel.A,
              "Provide a way to skip repeated content, e.g. via headings or bookmarks."),
        _rule("2.4.2", "Page Titled", ComplianceLevel.A,
              "Documents have titles that describe topic or purpose."),
        _rule("2.4.4", "Link Purpose (In Context)", ComplianceLevel.A,
              "The purpose of each link can be determined from its text and context."),
        _rule("2.4.6", "Headings and Labels", ComplianceLevel.AA,
              "Headings and labels describe topic or purpose."),
        _rule("2.4.9", "Link Purpose (Link Only)", ComplianceLevel.AAA,
              "The purpose of each link can be identified from the link text alone."),
        _rule("2.4.10", "Section Headings", ComplianceLevel.AAA,
              "Section headings are used to organize the content."),
        _rule("3.1.1", "Language of Page", ComplianceLevel.A,
              "The default human language of the document is programmatically determinable."),
        _rule("3.1.2", "Language of Parts", ComplianceLevel.AA,
              "The language of each passage can be programmatically determined."),
        _rule("3.2.1", "On Focus", ComplianceLevel.A,
              "Moving focus does not initiate an unexpected change of context."),
        _rule("3.2.4", "Consistent Identification", ComplianceLevel.AA,
              "Components with the same functionality are identified consistently."),
    )
}

RULE_CATALOG: Mapping[str, RuleDefinition] = MappingProxyType(_RULES)


# Fixed partition used by the audit report's per-level compliance table.
COMPLIANCE_PARTITION: Mapping[ComplianceLevel, FrozenSet[str]] = MappingProxyType(
    {
        ComplianceLevel.A: frozenset({"1.1.1", "1.3.1", "2.4.1", "2.4.4", "3.1.1"}),
        ComplianceLevel.AA: frozenset({"2.4.6", "3.1.2", "3.2.4"}),
        ComplianceLevel.AAA: frozenset({"2.4.9", "2.4.10"}),
    }
)


def is_known_rule(rule_id: str) -> bool:
    return rule_id in RULE_CATALOG


def get_rule(rule_id: str) -> RuleDefinition:
    """
    Look up a catalogued rule.

    Raises KeyError for identifiers outside the catalog.
    """
    return RULE_CATALOG[rule_id]


def validate_rule_ids(rule_ids: Iterable[str]) -> List[str]:
    """
    Return rule_ids as a list, raising ValueError on any unknown identifier.
    """
    ids = list(rule_ids)
    unknown = sorted({r for r in ids if r not in RULE_CATALOG})
    if unknown:
        raise ValueError(
            f"Unknown rule identifiers {unknown} "
            f"(catalog {RULE_CATALOG_VERSION})"
        )
    return ids
