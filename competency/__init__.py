"""Competency evidence extraction and validation for Mini Mentor."""

from competency.classifier import extract_competency_analysis, is_competency_analysis_task
from competency.detection import classify_response
from competency.extraction import extract_competency_data
from competency.taxonomy import DEFAULT_TAXONOMY, CompetencyTaxonomy

__all__ = [
    "CompetencyTaxonomy",
    "DEFAULT_TAXONOMY",
    "classify_response",
    "extract_competency_analysis",
    "extract_competency_data",
    "is_competency_analysis_task",
]
