#!/usr/bin/env python3
"""
Standalone database initialization script
Can be run from host machine (outside Docker) or inside container

    python scripts/init_db.py            # create missing tables
    python scripts/init_db.py --reset    # drop everything first
"""

import argparse
import logging
import os
import sys

# Ensure we're using the right Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from app.config import settings  # noqa: E402
from domain.models import Database  # noqa: E402

logger = logging.getLogger("recipebox.init_db")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create the RecipeBox schema")
    parser.add_argument(
        "--database-url", default=settings.database_url, help="SQLAlchemy database URL"
    )
    parser.add_argument(
        "--reset", action="store_true", help="Drop all tables before creating them"
    )
    args = parser.parse_args(argv)

    database = Database(args.database_url, echo=settings.db_echo)
    try:
        if args.reset:
            logger.warning("Dropping all tables")
            database.drop_schema()
        database.init_schema()
        return 0
    except Exception:
        logger.exception("Database initialization failed")
        return 1
    finally:
        database.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level.upper(), format=settings.log_format)

    print("\n" + "=" * 60)
    print("RecipeBox Database Initialization (Standalone)")
    print("=" * 60 + "\n")

    exit_code = main()

    print("\n" + "=" * 60)
    print("SUCCESS! Your database is ready to use." if exit_code == 0 else "FAILED! Check the errors above.")
    print("=" * 60 + "\n")

    sys.exit(exit_code)
