"""Database package for Mini Mentor competency reference data (Supabase)."""

from database.db import DatabaseManager
from database.models import CompetencyCodeRecord, TaskCompetencyRecord, create_tables

__all__ = ["DatabaseManager", "CompetencyCodeRecord", "TaskCompetencyRecord", "create_tables"]
