import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from city_explorer.database import SessionLocal, ensure_tables_exist
from city_explorer.logging_config import setup_logging
from city_explorer.models import Location
from city_explorer.services.categories import CATEGORY_SPECS


def cache_counts(db) -> dict[str, int]:
    """Row count for the locations table and every category cache table."""
    counts = {"locations": db.query(Location).count()}
    for spec in CATEGORY_SPECS.values():
        counts[spec.table] = db.query(spec.model).count()
    return counts


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create missing City Explorer tables.")
    parser.add_argument("--counts", action="store_true", help="Print cached row counts afterwards")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL for this run")
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    ensure_tables_exist()
    print("DB table check complete: created only missing tables.")
    if args.counts:
        db = SessionLocal()
        try:
            for table, n in cache_counts(db).items():
                print(f"{table}: {n}")
        finally:
            db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
