"""Pydantic models for competency analyses extracted from assistant responses."""

from enum import Enum
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


MIN_TEXT_LENGTH = 10


class CompetencyCode(BaseModel):
    """A UK-SPEC competency code (reference data)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(pattern=r"^[A-E][1-6]$")
    """Competency code, e.g. 'A1', 'C4'."""
    category: str = Field(pattern=r"^[A-E]$")
    """Category letter; always the first character of the id."""
    title: str = ""
    description: str = ""


class DemonstratedCompetency(BaseModel):
    """A competency the analysed task demonstrates."""

    model_config = ConfigDict(frozen=True)

    code: str
    """Competency code from the taxonomy (e.g. 'B2')."""
    confidence_percentage: int = Field(ge=1, le=100)
    """How confident the analysis is, 1-100."""
    explanation: str
    """How the task demonstrates the competency (at least 10 characters)."""

    @field_validator("explanation")
    @classmethod
    def _explanation_long_enough(cls, value: str) -> str:
        if len(value.strip()) < MIN_TEXT_LENGTH:
            raise ValueError(f"explanation must be at least {MIN_TEXT_LENGTH} characters long")
        return value


class DevelopmentOpportunity(BaseModel):
    """A suggestion for developing a competency further."""

    model_config = ConfigDict(frozen=True)

    code: str
    suggestion: str

    @field_validator("suggestion")
    @classmethod
    def _suggestion_long_enough(cls, value: str) -> str:
        if len(value.strip()) < MIN_TEXT_LENGTH:
            raise ValueError(f"suggestion must be at least {MIN_TEXT_LENGTH} characters long")
        return value


class CompetencyAnalysis(BaseModel):
    """Validated result of one competency analysis. Entries are tuples and cannot be changed in place."""

    model_config = ConfigDict(frozen=True)

    demonstrated_competencies: Tuple[DemonstratedCompetency, ...] = ()
    development_opportunities: Tuple[DevelopmentOpportunity, ...] = ()

    @property
    def codes(self) -> List[str]:
        return [comp.code for comp in self.demonstrated_competencies]

    def is_empty(self) -> bool:
        return not self.demonstrated_competencies and not self.development_opportunities


class AnalysisPayload(BaseModel):
    """Top-level shape of the JSON block embedded in a response."""

    analysis: CompetencyAnalysis


class ExtractionOutcome(BaseModel):
    """
    Analysis plus validation status.

    is_valid is true only when no errors were recorded. A result with
    is_valid=False may still carry usable entries; the caller decides
    whether a partial result is good enough.
    """

    model_config = ConfigDict(frozen=True)

    analysis: CompetencyAnalysis = Field(default_factory=CompetencyAnalysis)
    is_valid: bool = False
    errors: Tuple[str, ...] = ()


class ResponseLabel(str, Enum):
    QUESTION = "question"
    ANALYSIS = "analysis"
    NEITHER = "neither"


class ResponseClassification(BaseModel):
    """Labeled outcome of the natural-language detector."""

    model_config = ConfigDict(frozen=True)

    label: ResponseLabel
    matched_rules: Tuple[str, ...] = ()
    """Names of the rules that fired, in rule order."""
    codes: Tuple[str, ...] = ()
    """Bare competency codes found in the text, first-seen order."""
    has_confidence_markers: bool = False
