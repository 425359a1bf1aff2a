"""Pattern rules for classifying free-text assistant responses.

Used when a response carries no usable JSON block. Each rule is named so
its contribution to a classification can be inspected and tested on its own.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence

from competency.extraction import extract_competency_codes_from_text
from competency.taxonomy import CompetencyTaxonomy
from models.competency_analysis import (
    CompetencyAnalysis,
    DemonstratedCompetency,
    ResponseClassification,
    ResponseLabel,
)

logger = logging.getLogger(__name__)

FALLBACK_CONFIDENCE = 75
CONFIDENCE_MARKER_PATTERN = re.compile(r"\d+%", re.ASCII)


@dataclass(frozen=True)
class PatternRule:
    """A named, case-insensitive regular expression."""

    name: str
    pattern: str

    def __post_init__(self):
        object.__setattr__(self, "_regex", re.compile(self.pattern, re.IGNORECASE | re.ASCII))

    def matches(self, text: str) -> bool:
        return self._regex.search(text) is not None


CLARIFYING_QUESTION_RULES: Sequence[PatternRule] = (
    PatternRule("clarifying_questions_heading", r"\*\*clarifying questions:\*\*"),
    PatternRule("clarifying_questions_label", r"clarifying questions?:"),
    PatternRule("questions_for_clarification", r"questions? for clarification"),
    PatternRule("need_more_information", r"i need.*more information"),
    PatternRule("provide_more_details", r"could you.*provide.*details"),
    PatternRule("additional_information_needed", r"additional information.*needed"),
    PatternRule("help_me_understand", r"help me understand"),
    PatternRule("what_specifically", r"what.*specifically"),
    PatternRule("can_you_elaborate", r"can you.*elaborate"),
)

ANALYSIS_MARKER_RULES: Sequence[PatternRule] = (
    PatternRule("analysis_heading", r"\*\*Analysis:\*\*"),
    PatternRule("code_with_confidence", r"competency\s+[A-E][1-6].*confidence:\s*\d+%"),
    PatternRule("bold_code_with_bold_confidence", r"\*\*[A-E][1-6]\*\*.*\*\*\(confidence:\s*\d+%\)\*\*"),
    PatternRule("demonstrates_competency", r"demonstrates?\s+competenc(y|ies).*[A-E][1-6]"),
)

DEVELOPMENT_SUGGESTION_RULES: Sequence[PatternRule] = (
    PatternRule("development_suggestions_heading", r"\*\*development suggestions:\*\*"),
    PatternRule("development_opportunities", r"development opportunit(y|ies)"),
    PatternRule("to_strengthen_competency", r"to strengthen.*competenc"),
    PatternRule("consider_expanding", r"consider.*expanding"),
    PatternRule("you_could_demonstrate", r"you could.*demonstrate"),
    PatternRule("additional_evidence", r"additional.*evidence"),
)


def matching_rules(text: str, rules: Sequence[PatternRule]) -> List[str]:
    """Names of the rules that match, in rule order."""
    return [rule.name for rule in rules if rule.matches(text or "")]


def looks_like_clarifying_questions(text: str) -> bool:
    return bool(matching_rules(text, CLARIFYING_QUESTION_RULES))


def looks_like_completed_analysis(text: str) -> bool:
    return bool(matching_rules(text, ANALYSIS_MARKER_RULES))


def contains_development_suggestions(text: str) -> bool:
    return bool(matching_rules(text, DEVELOPMENT_SUGGESTION_RULES))


def has_confidence_markers(text: str) -> bool:
    return CONFIDENCE_MARKER_PATTERN.search(text or "") is not None


def extract_bare_codes(text: str, taxonomy: Optional[CompetencyTaxonomy] = None) -> List[str]:
    return extract_competency_codes_from_text(text, taxonomy)


def classify_response(
    text: str,
    taxonomy: Optional[CompetencyTaxonomy] = None,
) -> ResponseClassification:
    """
    Classify a free-text response as a clarifying-question turn, a completed
    analysis, or neither.

    A clarifying-question match vetoes the analysis label. Otherwise the text
    is an analysis only when it has an analysis marker, at least one valid
    competency code and at least one confidence percentage.
    """
    text = text or ""
    question_rules = matching_rules(text, CLARIFYING_QUESTION_RULES)
    analysis_rules = matching_rules(text, ANALYSIS_MARKER_RULES)
    codes = extract_bare_codes(text, taxonomy)
    confidence_markers = has_confidence_markers(text)

    if question_rules:
        label = ResponseLabel.QUESTION
    elif analysis_rules and codes and confidence_markers:
        label = ResponseLabel.ANALYSIS
    else:
        label = ResponseLabel.NEITHER

    logger.debug(
        f"Classified response as {label.value} "
        f"(rules: {question_rules + analysis_rules}, codes: {codes})"
    )
    return ResponseClassification(
        label=label,
        matched_rules=question_rules + analysis_rules,
        codes=codes,
        has_confidence_markers=confidence_markers,
    )


def fallback_analysis(codes: Sequence[str]) -> CompetencyAnalysis:
    """Best-effort analysis from bare codes: fixed confidence, generated explanation."""
    return CompetencyAnalysis(
        demonstrated_competencies=[
            DemonstratedCompetency(
                code=code,
                confidence_percentage=FALLBACK_CONFIDENCE,
                explanation=f"Competency {code} identified from task analysis",
            )
            for code in codes
        ],
        development_opportunities=[],
    )
