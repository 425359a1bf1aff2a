import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from competency import (
    DEFAULT_TAXONOMY,
    classify_response,
    extract_competency_analysis,
    extract_competency_data,
    is_competency_analysis_task,
)
from competency.taxonomy import CompetencyTaxonomy
from utils.logger import configure_logger, get_logger

logger = get_logger("main")


def load_taxonomy(source: str) -> CompetencyTaxonomy:
    """Built-in UK-SPEC taxonomy, or the competency_code table when source is 'database'."""
    if source == "database":
        from database.db import DatabaseManager
        return DatabaseManager().load_taxonomy()
    return DEFAULT_TAXONOMY


def analyze_response(text: str, taxonomy: CompetencyTaxonomy) -> dict:
    """Run every stage of the pipeline on one response and collect the results."""
    outcome = extract_competency_data(text, taxonomy)
    analysis = extract_competency_analysis(text, taxonomy)
    return {
        "is_competency_analysis": is_competency_analysis_task(text, taxonomy),
        "classification": classify_response(text, taxonomy).model_dump(mode="json"),
        "structured": outcome.model_dump(mode="json"),
        "analysis": analysis.model_dump(mode="json") if analysis is not None else None,
    }


def run_analyze(args) -> int:
    if args.input:
        text = Path(args.input).read_text(encoding="utf-8")
    else:
        text = sys.stdin.read()

    taxonomy = load_taxonomy(args.taxonomy)
    result = analyze_response(text, taxonomy)
    logger.info(
        f"Analysed response ({len(text)} chars) - "
        f"competency analysis: {result['is_competency_analysis']}"
    )
    print(json.dumps(result, indent=2))
    return 0


def run_seed(args) -> int:
    from utils.db_utils import seed_competency_codes_to_db
    return 0 if seed_competency_codes_to_db() else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mini Mentor - UK-SPEC competency analysis tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Extract the competency analysis from an assistant response")
    analyze.add_argument("--input", help="File holding the response text (defaults to stdin)")
    analyze.add_argument(
        "--taxonomy",
        choices=["static", "database"],
        default="static",
        help="Where to load competency codes from",
    )
    analyze.set_defaults(func=run_analyze)

    seed = subparsers.add_parser("seed", help="Insert or update the UK-SPEC codes in Supabase")
    seed.set_defaults(func=run_seed)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    # Load environment variables from .env file in project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)
    configure_logger("competency")

    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        print(f"❌ {args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
