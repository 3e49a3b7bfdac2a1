#!/usr/bin/env python3
"""
Create catalog tables (products, product_statuses, product_images) and seed
the product status catalog.

Uses DATABASE_URL (or config/service_config.yml). Does NOT drop existing tables.
"""

from __future__ import annotations
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from product_catalog.database.repository import ProductRepository
from product_catalog.utils.config_loader import load_service_config


def main() -> int:
    cfg = load_service_config()

    try:
        repository = ProductRepository(connection_string=cfg.database.url)

        with repository.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")

        # Only missing tables are created; statuses are seeded if absent
        repository.create_tables()
        tables = inspect(repository.engine).get_table_names()
        print("✅ Catalog tables now exist:", sorted(tables))
        print("✅ Product statuses:", [(s.id, s.code) for s in repository.list_statuses()])
        return 0

    except OperationalError as e:
        print(f"❌ Failed to connect to database: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
