"""Entry points: is a response a completed competency analysis, and what does it contain."""

import logging
from typing import Optional

from competency.detection import classify_response, fallback_analysis
from competency.extraction import extract_competency_data
from competency.taxonomy import CompetencyTaxonomy
from models.competency_analysis import CompetencyAnalysis, ResponseLabel

logger = logging.getLogger(__name__)


def _as_text(response_text) -> str:
    return response_text if isinstance(response_text, str) else ""


def is_competency_analysis_task(
    response_text: str,
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> bool:
    """
    Determine whether a response is a completed competency analysis.

    True when the structured JSON block is fully valid and lists at least one
    demonstrated competency; otherwise falls back to the natural-language rules.
    """
    text = _as_text(response_text)

    outcome = extract_competency_data(text, taxonomy)
    if outcome.is_valid and outcome.analysis.demonstrated_competencies:
        return True

    return classify_response(text, taxonomy).label == ResponseLabel.ANALYSIS


def extract_competency_analysis(
    response_text: str,
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> Optional[CompetencyAnalysis]:
    """
    Extract the competency analysis from a response.

    Returns:
        The structured analysis when it holds at least one demonstrated
        competency, otherwise an analysis synthesized from the competency codes
        mentioned in the prose. None when the response is not a completed
        analysis or no codes can be found.
    """
    text = _as_text(response_text)

    if not is_competency_analysis_task(text, taxonomy):
        return None

    outcome = extract_competency_data(text, taxonomy)
    if outcome.analysis.demonstrated_competencies:
        if not outcome.is_valid:
            logger.debug(f"Returning partially valid analysis: {outcome.errors}")
        return outcome.analysis

    codes = classify_response(text, taxonomy).codes
    if not codes:
        return None

    logger.debug(f"Falling back to bare competency codes: {codes}")
    return fallback_analysis(codes)
