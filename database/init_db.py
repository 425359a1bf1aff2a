"""Seed the competency_code table in Supabase."""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from database.models import create_tables
from utils.db_utils import seed_competency_codes_to_db


def main(argv: Optional[List[str]] = None) -> int:
    """
    Seed the UK-SPEC competency codes.

    Note: For Supabase, tables are typically created via SQL Editor.
    --create-tables creates them through SQLAlchemy using DATABASE_URL,
    which is mainly for local development/testing.
    """
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    parser = argparse.ArgumentParser(description="Seed the UK-SPEC competency codes")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create competency tables with SQLAlchemy (uses DATABASE_URL)",
    )
    args = parser.parse_args(argv)

    if args.create_tables:
        database_url = os.environ.get("DATABASE_URL")
        if not database_url:
            print("❌ DATABASE_URL environment variable not set.")
            print("Please set it in your .env file:")
            print("DATABASE_URL=postgresql://<user>:<password>@<host>:5432/<db>")
            return 1
        try:
            create_tables(database_url)
            print("✓ Competency tables created")
        except Exception as e:
            print(f"❌ Error creating tables: {e}")
            return 1

    if not os.environ.get("SUPABASE_URL"):
        print("❌ SUPABASE_URL environment variable not set.")
        print("Please set it in your .env file:")
        print("SUPABASE_URL=https://<project-ref>.supabase.co")
        return 1

    if not os.environ.get("SUPABASE_KEY"):
        print("❌ SUPABASE_KEY environment variable not set.")
        print("Please set it in your .env file:")
        print("SUPABASE_KEY=<service-role-key>")
        print("Get it from: Supabase Dashboard -> Settings -> API -> service_role key")
        return 1

    print("Seeding competency codes...")
    return 0 if seed_competency_codes_to_db() else 1


if __name__ == "__main__":
    sys.exit(main())
