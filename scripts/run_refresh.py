#!/usr/bin/env python3
"""
Run one product refresh outside the web process (e.g. from cron).

Only meaningful with a shared staging cache (REDIS_URL set); the in-memory
cache of a fresh process is always empty.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv
load_dotenv()

from product_catalog.api.main import build_product_service
from product_catalog.error_handler import CatalogError
from product_catalog.utils.config_loader import load_service_config


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Reconcile staged SAP products against the catalog")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to service config YAML file (default: config/service_config.yml)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    args = parser.parse_args()

    setup_logging(args.verbose, args.log_file)
    logger = logging.getLogger("run_refresh")

    cfg = load_service_config(args.config)
    if cfg.cache.backend != "redis":
        logger.warning("Staging cache backend is '%s'; this process will see no staged products", cfg.cache.backend)

    service = build_product_service(cfg)
    try:
        result = asyncio.run(service.auto_refresh_products())
    except CatalogError as e:
        logger.error("Refresh failed (%s): %s", e.code, e.message)
        return 1

    logger.info("Created: %s", result.created)
    logger.info("Updated: %s", result.updated)
    if result.skipped:
        logger.warning("Skipped (unknown status): %s", result.skipped)
    return 0


if __name__ == "__main__":
    sys.exit(main())
