"""Database utilities for seeding competency codes and re-validating analyses."""

import os
from typing import Optional

from database.db import COMPETENCY_CODE_TABLE, DatabaseManager
from models.competency_analysis import CompetencyAnalysis
from utils.logger import get_db_logger

logger = get_db_logger("db_utils")


def seed_competency_codes_to_db(
    supabase_url: Optional[str] = None,
    supabase_key: Optional[str] = None,
    db: Optional[DatabaseManager] = None,
) -> bool:
    """
    Insert or update the UK-SPEC competency codes and report drift.

    Codes in the table that aren't part of UK-SPEC are reported but kept, so
    tasks that still reference them don't break.

    Args:
        supabase_url: Supabase project URL (optional, uses SUPABASE_URL env var if not provided)
        supabase_key: Supabase service role key (optional, uses SUPABASE_KEY env var if not provided)
        db: Existing DatabaseManager to use instead of creating one

    Returns:
        True if successful, False otherwise
    """
    if db is None:
        if not supabase_url and not os.environ.get("SUPABASE_URL"):
            logger.warning("SUPABASE_URL not set, skipping seed")
            print("⚠ Warning: SUPABASE_URL not set, skipping seed")
            return False

        if not supabase_key and not os.environ.get("SUPABASE_KEY"):
            logger.warning("SUPABASE_KEY not set, skipping seed")
            print("⚠ Warning: SUPABASE_KEY not set, skipping seed")
            return False

    try:
        if db is None:
            db = DatabaseManager(supabase_url=supabase_url, supabase_key=supabase_key)

        rows = db.upsert_competency_codes()
        print(f"   ✓ Updated/inserted {len(rows)} competency codes")

        _, unexpected = db.check_taxonomy_drift()
        if unexpected:
            print(f"   ⚠ Codes outside UK-SPEC left in place: {', '.join(unexpected)}")
            print("      Migrate tasks that reference them before deleting them")
        return True

    except Exception as e:
        logger.error(f"Error seeding competency codes: {e}", exc_info=True)

        print("\n❌ Error seeding competency codes:")
        print(f"   Error type: {type(e).__name__}")
        print(f"   Error message: {str(e)}")
        print("   📝 Check logs/database_*.log for full details")

        error_str = str(e).lower()
        if "supabase_url" in error_str or "supabase_key" in error_str:
            print("\n   💡 Tip: Check your Supabase environment variables")
            print("      Get them from: Supabase Dashboard -> Settings -> API")
        elif "connection" in error_str or "network" in error_str:
            print("\n   💡 Tip: Check your network connection and Supabase URL")
        elif "does not exist" in error_str or "relation" in error_str:
            print(f"\n   💡 Tip: Ensure the '{COMPETENCY_CODE_TABLE}' table exists")
            print("      Run: python -m database.init_db --create-tables")
        elif "row-level" in error_str or "permission" in error_str:
            print("\n   💡 Tip: Row Level Security might be blocking the operation")
            print("      Ensure you're using the service_role key (not anon key)")

        return False


def filter_analysis_to_stored_codes(
    analysis: CompetencyAnalysis,
    db: DatabaseManager,
) -> CompetencyAnalysis:
    """
    Re-validate an analysis against the stored competency codes before it is persisted.

    Returns:
        A new analysis without entries whose code the store doesn't know
    """
    codes = analysis.codes + [opp.code for opp in analysis.development_opportunities]
    valid, invalid = db.validate_competency_codes(codes)
    if not invalid:
        return analysis

    logger.warning(f"Dropping entries with codes unknown to the store: {invalid}")
    known = set(valid)
    return CompetencyAnalysis(
        demonstrated_competencies=[
            comp for comp in analysis.demonstrated_competencies if comp.code in known
        ],
        development_opportunities=[
            opp for opp in analysis.development_opportunities if opp.code in known
        ],
    )
