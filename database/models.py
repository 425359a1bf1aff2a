"""Database models for the competency reference data and task join rows."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompetencyCodeRecord(Base):
    """
    UK-SPEC competency code, seeded once and read-only afterwards.

    Schema matches the Supabase table:
    - id: code such as 'A1' or 'C4'
    - category: 'A'..'E'
    - title / description: official wording and evidence examples
    """
    __tablename__ = "competency_code"

    id = Column(String(8), primary_key=True)
    category = Column(String(1), nullable=False, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("category IN ('A', 'B', 'C', 'D', 'E')", name="ck_competency_code_category"),
    )

    def to_dict(self) -> dict:
        """Convert model to dictionary."""
        return {
            "id": self.id,
            "category": self.category,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class TaskCompetencyRecord(Base):
    """
    Links a competency-log task to a competency code.

    One row per (task, code) pair; the composite primary key keeps a task
    from claiming the same competency twice.
    """
    __tablename__ = "task_competency"

    task_id = Column(String(36), primary_key=True)
    competency_code_id = Column(String(8), ForeignKey("competency_code.id"), primary_key=True)
    # 0-100
    confidence_score = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    source_type = Column(String(16), nullable=False, default="ai_suggested")
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "source_type IN ('ai_suggested', 'manual_added', 'ai_modified')",
            name="ck_task_competency_source_type",
        ),
    )

    def to_dict(self) -> dict:
        """Convert model to dictionary."""
        return {
            "task_id": self.task_id,
            "competency_code_id": self.competency_code_id,
            "confidence_score": self.confidence_score,
            "notes": self.notes,
            "source_type": self.source_type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


def create_tables(database_url: str):
    """
    Create the competency tables if they don't exist.

    Args:
        database_url: SQLAlchemy database URL

    Returns:
        The engine used, so callers can open sessions against it
    """
    engine = create_engine(database_url)
    Base.metadata.create_all(engine)
    return engine
