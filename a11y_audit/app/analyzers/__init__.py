"""
Built-in heuristic analyzers.

Each analyzer infers one structural dimension of an untagged document
(headings, tables, links, images, metadata) from its extracted text and
reports accessibility issues against the rule catalog.
"""

from typing import List

from .base import Analyzer, BaseAnalyzer, FixPlan
from .heading_structure import HeadingStructureAnalyzer
from .image_inference import ImageInferenceAnalyzer
from .link_text import LinkTextAnalyzer
from .metadata_inference import MetadataInferenceAnalyzer
from .table_structure import TableStructureAnalyzer


def default_analyzers(default_language: str = "en") -> List[BaseAnalyzer]:
    return [
        MetadataInferenceAnalyzer(default_language=default_language),
        HeadingStructureAnalyzer(),
        ImageInferenceAnalyzer(),
        TableStructureAnalyzer(),
        LinkTextAnalyzer(),
    ]


__all__ = [
    "Analyzer",
    "BaseAnalyzer",
    "FixPlan",
    "HeadingStructureAnalyzer",
    "ImageInferenceAnalyzer",
    "LinkTextAnalyzer",
    "MetadataInferenceAnalyzer",
    "TableStructureAnalyzer",
    "default_analyzers",
]
