"""Seed the record store with sample data.

Usage:
    python scripts/seed_records.py                    # Fixed sample records only
    python scripts/seed_records.py --generate         # Plus random records
    python scripts/seed_records.py --db other.db --generate --customers 500
"""

import argparse
import logging
import random
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from records.db import (
    DEFAULT_DB_PATH,
    count_records,
    init_records_db,
    seed_generated_records,
    seed_sample_records,
)


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description="Seed customers, employees and external companies")
    parser.add_argument("--db", type=Path, default=DEFAULT_DB_PATH, help="Database path")
    parser.add_argument("--generate", action="store_true", help="Add randomly generated records")
    parser.add_argument("--employees", type=int, default=50, help="Target employee count")
    parser.add_argument("--customers", type=int, default=100, help="Target customer count")
    parser.add_argument("--companies", type=int, default=100, help="Target company count")
    parser.add_argument("--random-seed", type=int, help="Seed for reproducible generated data")

    args = parser.parse_args()

    init_records_db(args.db)
    seed_sample_records(args.db)

    if args.generate:
        seed_generated_records(
            employees=args.employees,
            customers=args.customers,
            companies=args.companies,
            db_path=args.db,
            rng=random.Random(args.random_seed),
        )

    counts = count_records(args.db)
    print(f"\nRecord store: {args.db}")
    for table, count in counts.items():
        print(f"  {table}: {count}")


if __name__ == "__main__":
    main()
