"""Competency reference data operations using the Supabase Python client."""

import os
import time
from typing import Iterable, List, Optional, Tuple

from supabase import create_client, Client

from competency.taxonomy import DEFAULT_TAXONOMY, UK_SPEC_COMPETENCY_CODES, CompetencyTaxonomy
from utils.logger import get_db_logger

# Initialize logger immediately when module is imported
logger = get_db_logger("db")

COMPETENCY_CODE_TABLE = "competency_code"


def _is_retryable(error: Exception) -> bool:
    error_str = str(error).lower()
    return "timeout" in error_str or "connection" in error_str or "network" in error_str


class DatabaseManager:
    """Loads, seeds and checks the authoritative competency_code table."""

    def __init__(
        self,
        supabase_url: str = None,
        supabase_key: str = None,
        client: Optional[Client] = None,
        max_retries: int = 3,
        retry_delay: float = 2,
    ):
        """
        Initialize database manager with a Supabase client.

        Args:
            supabase_url: Supabase project URL (e.g., https://<project>.supabase.co)
                         If None, reads from SUPABASE_URL environment variable.
            supabase_key: Supabase service role key (for server-side operations)
                         If None, reads from SUPABASE_KEY environment variable.
            client: Ready-made client; skips credential lookup when given
            max_retries: Attempts for writes that fail with transient errors
            retry_delay: Initial backoff in seconds, doubled on each retry
        """
        self.max_retries = max_retries
        self.retry_delay = retry_delay

        if client is not None:
            self.client = client
            return

        if supabase_url is None:
            supabase_url = os.environ.get("SUPABASE_URL")
            if not supabase_url:
                error_msg = "SUPABASE_URL environment variable not set"
                logger.error(error_msg)
                raise ValueError(
                    f"{error_msg}. "
                    "Format: https://<project-ref>.supabase.co"
                )

        if supabase_key is None:
            supabase_key = os.environ.get("SUPABASE_KEY")
            if not supabase_key:
                error_msg = "SUPABASE_KEY environment variable not set"
                logger.error(error_msg)
                raise ValueError(
                    f"{error_msg}. "
                    "Get it from Supabase Dashboard -> Settings -> API -> service_role key"
                )

        try:
            self.client = create_client(supabase_url, supabase_key)
            logger.info(f"Initialized Supabase client for: {supabase_url}")
        except Exception as e:
            logger.error(f"Failed to create Supabase client: {e}", exc_info=True)
            raise

    def fetch_competency_codes(self) -> List[dict]:
        """
        Fetch every row of the competency_code table, ordered by id.

        Raises:
            Exception: Whatever the Supabase client raises, after logging it
        """
        try:
            response = self.client.table(COMPETENCY_CODE_TABLE).select("*").order("id").execute()
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} competency codes")
            return rows
        except Exception as e:
            logger.error(f"Error fetching competency codes: {e}", exc_info=True)
            raise

    def load_taxonomy(self) -> CompetencyTaxonomy:
        """
        Load the taxonomy from the authoritative store.

        Call once at process start and pass the result to the extraction
        functions; the taxonomy is not reloaded afterwards.

        Raises:
            ValueError: If the table is empty or holds malformed codes
        """
        rows = self.fetch_competency_codes()
        if not rows:
            raise ValueError(
                f"{COMPETENCY_CODE_TABLE} table is empty. "
                "Run `python -m database.init_db` to seed it."
            )
        taxonomy = CompetencyTaxonomy.from_records(rows)
        logger.info(f"Loaded competency taxonomy with {len(taxonomy)} codes")
        return taxonomy

    def upsert_competency_codes(self, codes: Optional[Iterable[dict]] = None) -> List[dict]:
        """
        Insert or update competency codes (defaults to the UK-SPEC set).

        Existing codes keep their id; title, description and category are
        overwritten. Codes in the table but not in `codes` are left alone so
        existing task references stay intact.

        Returns:
            Rows returned by Supabase
        """
        data = [
            {
                "id": code["id"],
                "category": code["category"],
                "title": code["title"],
                "description": code["description"],
            }
            for code in (codes if codes is not None else UK_SPEC_COMPETENCY_CODES)
        ]
        logger.info(f"Upserting {len(data)} competency codes")

        for attempt in range(self.max_retries):
            try:
                response = self.client.table(COMPETENCY_CODE_TABLE).upsert(
                    data, on_conflict="id"
                ).execute()
                result = response.data or []
                logger.info(f"✓ Upserted {len(result)} competency codes")
                return result
            except Exception as e:
                if attempt < self.max_retries - 1 and _is_retryable(e):
                    wait_time = self.retry_delay * (2 ** attempt)  # Exponential backoff
                    logger.warning(
                        f"Error on attempt {attempt + 1}/{self.max_retries}: {e}. "
                        f"Retrying in {wait_time} seconds..."
                    )
                    time.sleep(wait_time)
                    continue
                logger.error(
                    f"Error in upsert_competency_codes after {attempt + 1} attempts: {e}",
                    exc_info=True,
                )
                raise
        return []

    def validate_competency_codes(self, codes: Iterable[str]) -> Tuple[List[str], List[str]]:
        """
        Split codes into those present in the store and those that are not.

        Falls back to the built-in taxonomy when the store can't be read.

        Returns:
            (valid, invalid), each in input order
        """
        codes = list(codes)
        try:
            known = {row.get("id") for row in self.fetch_competency_codes()}
        except Exception as e:
            logger.warning(f"Falling back to built-in taxonomy for code validation: {e}")
            known = set(DEFAULT_TAXONOMY.codes)

        valid = [code for code in codes if code in known]
        invalid = [code for code in codes if code not in known]
        if invalid:
            logger.warning(f"Codes not found in {COMPETENCY_CODE_TABLE}: {invalid}")
        return valid, invalid

    def check_taxonomy_drift(
        self,
        expected: CompetencyTaxonomy = DEFAULT_TAXONOMY,
    ) -> Tuple[List[str], List[str]]:
        """
        Compare the stored codes with the expected taxonomy.

        Returns:
            (missing, unexpected): expected codes absent from the store, and
            stored codes the expected taxonomy doesn't know
        """
        rows = self.fetch_competency_codes()
        stored = [str(row["id"]) for row in rows if row.get("id")]
        if len(stored) != len(rows):
            logger.warning(f"{len(rows) - len(stored)} rows in {COMPETENCY_CODE_TABLE} have no id")
        missing = [code for code in expected.codes if code not in stored]
        unexpected = [code for code in stored if code not in expected]
        if missing or unexpected:
            logger.warning(f"Competency taxonomy drift - missing: {missing}, unexpected: {unexpected}")
        else:
            logger.info("Stored competency codes match the expected taxonomy")
        return missing, unexpected
