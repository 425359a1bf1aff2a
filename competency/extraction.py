"""Extract and validate the structured competency analysis embedded in a response."""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from competency.taxonomy import CompetencyTaxonomy, resolve_taxonomy
from models.competency_analysis import (
    MIN_TEXT_LENGTH,
    CompetencyAnalysis,
    DemonstratedCompetency,
    DevelopmentOpportunity,
    ExtractionOutcome,
)

logger = logging.getLogger(__name__)

# First fenced block opened with ```json
JSON_BLOCK_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")
BARE_CODE_PATTERN = re.compile(r"\b([A-E][1-6])\b", re.ASCII)


def _reject_constant(name: str):
    raise ValueError(f"Unexpected token {name} in JSON")


def _is_number(value: Any) -> bool:
    # bool is an int subclass but JSON true/false is not a number
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _invalid_outcome(error: str) -> ExtractionOutcome:
    return ExtractionOutcome(analysis=CompetencyAnalysis(), is_valid=False, errors=[error])


def validate_demonstrated_competency(comp: Any, taxonomy: CompetencyTaxonomy) -> List[str]:
    """Return every field error of one demonstrated-competency entry."""
    if not isinstance(comp, dict):
        return ["Competency entry must be an object"]

    errors = []

    code = comp.get("code")
    if not code or not isinstance(code, str):
        errors.append("Competency code is required and must be a string")
    elif not taxonomy.is_valid_code(code):
        errors.append(f"Invalid competency code: {code}")

    confidence = comp.get("confidence_percentage")
    if not _is_number(confidence):
        errors.append("Confidence percentage must be a number")
    elif isinstance(confidence, float) and not confidence.is_integer():
        errors.append("Confidence percentage must be a whole number")
    elif confidence < 1 or confidence > 100:
        errors.append("Confidence percentage must be between 1 and 100")

    explanation = comp.get("explanation")
    if not explanation or not isinstance(explanation, str):
        errors.append("Explanation is required and must be a string")
    elif len(explanation.strip()) < MIN_TEXT_LENGTH:
        errors.append(f"Explanation must be at least {MIN_TEXT_LENGTH} characters long")

    return errors


def validate_development_opportunity(opp: Any, taxonomy: CompetencyTaxonomy) -> List[str]:
    """Return every field error of one development-opportunity entry."""
    if not isinstance(opp, dict):
        return ["Development opportunity must be an object"]

    errors = []

    code = opp.get("code")
    if not code or not isinstance(code, str):
        errors.append("Development opportunity code is required and must be a string")
    elif not taxonomy.is_valid_code(code):
        errors.append(f"Invalid competency code in development opportunity: {code}")

    suggestion = opp.get("suggestion")
    if not suggestion or not isinstance(suggestion, str):
        errors.append("Development suggestion is required and must be a string")
    elif len(suggestion.strip()) < MIN_TEXT_LENGTH:
        errors.append(f"Development suggestion must be at least {MIN_TEXT_LENGTH} characters long")

    return errors


def _entry_list(analysis: dict, key: str, errors: List[str]) -> list:
    if key not in analysis:
        return []
    entries = analysis[key]
    # an explicit null is present, so it is reported like any other non-list
    if not isinstance(entries, list):
        errors.append(f"{key} must be a list")
        return []
    return entries


def extract_competency_data(
    response_text: str,
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> ExtractionOutcome:
    """
    Extract competency data from an assistant response.

    Looks for the first ```json fenced block, parses it and validates every
    entry against the taxonomy. Invalid entries are dropped and reported;
    valid entries are kept even when others fail.

    Args:
        response_text: Rendered assistant response, Markdown included
        taxonomy: Taxonomy to validate codes against (defaults to UK-SPEC)

    Returns:
        ExtractionOutcome with the accepted entries, is_valid and errors.
        Never raises for string input.
    """
    taxonomy = resolve_taxonomy(taxonomy)

    match = JSON_BLOCK_PATTERN.search(response_text or "")
    if not match:
        return _invalid_outcome("No JSON structure found in response")

    try:
        parsed = json.loads(match.group(1), parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        logger.debug(f"JSON block failed to parse: {e}")
        return _invalid_outcome(f"JSON parsing error: {e}")

    analysis_data = parsed.get("analysis") if isinstance(parsed, dict) else None
    if not isinstance(analysis_data, dict):
        return _invalid_outcome("Missing analysis object in JSON")

    errors: List[str] = []
    demonstrated_entries = _entry_list(analysis_data, "demonstrated_competencies", errors)
    development_entries = _entry_list(analysis_data, "development_opportunities", errors)

    demonstrated: List[DemonstratedCompetency] = []
    seen_codes = set()
    for comp in demonstrated_entries:
        entry_errors = validate_demonstrated_competency(comp, taxonomy)
        if entry_errors:
            errors.extend(entry_errors)
            continue

        if comp["code"] in seen_codes:
            errors.append(f"Duplicate competency code: {comp['code']}")
            continue

        seen_codes.add(comp["code"])
        demonstrated.append(
            DemonstratedCompetency(
                code=comp["code"],
                confidence_percentage=int(comp["confidence_percentage"]),
                explanation=comp["explanation"],
            )
        )

    development: List[DevelopmentOpportunity] = []
    for opp in development_entries:
        entry_errors = validate_development_opportunity(opp, taxonomy)
        if entry_errors:
            errors.extend(entry_errors)
            continue
        development.append(DevelopmentOpportunity(code=opp["code"], suggestion=opp["suggestion"]))

    logger.debug(
        f"Structured extraction: {len(demonstrated)} demonstrated, "
        f"{len(development)} development, {len(errors)} errors"
    )
    return ExtractionOutcome(
        analysis=CompetencyAnalysis(
            demonstrated_competencies=demonstrated,
            development_opportunities=development,
        ),
        is_valid=not errors,
        errors=errors,
    )


def extract_competency_codes_from_text(
    text: str,
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> List[str]:
    """Whole-word competency codes in first-seen order, taxonomy members only, no repeats."""
    taxonomy = resolve_taxonomy(taxonomy)
    codes: List[str] = []
    for code in BARE_CODE_PATTERN.findall(text or ""):
        if taxonomy.is_valid_code(code) and code not in codes:
            codes.append(code)
    return codes


def unique_competency_codes(
    demonstrated: List[DemonstratedCompetency],
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> List[str]:
    """Codes of the demonstrated competencies, de-duplicated and restricted to the taxonomy."""
    taxonomy = resolve_taxonomy(taxonomy)
    codes: List[str] = []
    for comp in demonstrated:
        if taxonomy.is_valid_code(comp.code) and comp.code not in codes:
            codes.append(comp.code)
    return codes


def to_task_competencies(
    demonstrated: List[DemonstratedCompetency],
    task_id: Optional[str] = None,
    source_type: str = "ai_suggested",
) -> List[Dict[str, Any]]:
    """
    Convert demonstrated competencies to task_competency rows.

    Example:
        [DemonstratedCompetency(code="C1", confidence_percentage=90, explanation="...")]
        -> [{"competency_code_id": "C1", "confidence_score": 90, "notes": "...",
             "source_type": "ai_suggested"}]
    """
    rows = []
    for comp in demonstrated:
        row = {
            "competency_code_id": comp.code,
            "confidence_score": comp.confidence_percentage,
            "notes": comp.explanation,
            "source_type": source_type,
        }
        if task_id is not None:
            row["task_id"] = task_id
        rows.append(row)
    return rows
