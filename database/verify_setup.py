"""Verify logger, Supabase credentials and the stored competency taxonomy."""

import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv


def verify_setup() -> bool:
    """Verify that logging and the competency_code table are properly set up."""
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    print("=" * 60)
    print("Mini Mentor Setup Verification")
    print("=" * 60)

    # 1. Check logger
    print("\n1. Checking logger...")
    try:
        from utils.logger import get_db_logger, get_log_dir
        logger = get_db_logger("verify")
        logger.info("Test log message - logger is working")
        print("   ✓ Logger imported and initialized")

        date_str = datetime.now().strftime("%Y-%m-%d")
        log_file = get_log_dir() / f"database_{date_str}.log"
        if log_file.exists():
            print(f"   ✓ Log file exists: {log_file}")
        else:
            print(f"   ⚠ Log file not found (may be created on first use): {log_file}")
    except Exception as e:
        print(f"   ❌ Logger setup failed: {e}")
        return False

    # 2. Check Supabase credentials
    print("\n2. Checking Supabase credentials...")
    if not os.environ.get("SUPABASE_URL") or not os.environ.get("SUPABASE_KEY"):
        print("   ⚠ SUPABASE_URL / SUPABASE_KEY not set (the built-in taxonomy will be used)")
        return True
    print(f"   ✓ SUPABASE_URL is set: {os.environ['SUPABASE_URL']}")

    # 3. Compare stored competency codes with UK-SPEC
    print("\n3. Checking stored competency codes...")
    try:
        from database.db import DatabaseManager
        db = DatabaseManager()
        missing, unexpected = db.check_taxonomy_drift()
    except Exception as e:
        print(f"   ❌ Could not read competency codes: {e}")
        return False

    if missing:
        print(f"   ❌ Missing UK-SPEC codes: {', '.join(missing)}")
        print("      Run: python -m database.init_db")
        return False
    if unexpected:
        print(f"   ⚠ Codes outside UK-SPEC: {', '.join(unexpected)}")
    else:
        print("   ✓ Stored codes match UK-SPEC")

    print("\n" + "=" * 60)
    print("✓ All checks passed! Setup looks good.")
    print("=" * 60)
    return True


if __name__ == "__main__":
    success = verify_setup()
    sys.exit(0 if success else 1)
