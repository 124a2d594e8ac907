"""
Seed the scorecard database with stages, sub-categories, sample KPIs and weeks.
"""

from __future__ import annotations

import argparse
import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from app.config import get_logging_settings
from db.seed import seed_scorecard
from db.session import session_scope

logger = logging.getLogger("scripts.seed_scorecard")


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed scorecard reference data.")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be created without committing.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, get_logging_settings().level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    try:
        with session_scope(commit=not args.dry_run) as db:
            summary = seed_scorecard(db)
    except SQLAlchemyError:
        logger.exception("Seeding failed")
        return 1

    payload = {
        "dry_run": args.dry_run,
        "stages_created": summary.stages_created,
        "sub_categories_created": summary.sub_categories_created,
        "kpis_created": summary.kpis_created,
        "weeks_created": summary.weeks_created,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
