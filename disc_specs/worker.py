"""Entry point for running one enrichment batch, e.g. from cron.

    python -m disc_specs.worker
"""
from __future__ import annotations

import asyncio
import logging

from disc_specs.core.config import settings
from disc_specs.core.database import init_db
from disc_specs.services.scrape_worker_service import run_batch

logger = logging.getLogger(__name__)


def main() -> None:
    """Process the due jobs once and log the summary."""

    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()
    summary = asyncio.run(run_batch())
    logger.info("Processed %d jobs", summary.processed_count)
    for result in summary.results:
        logger.info("  job %s %s: %s", result.job_id, result.title, result.status)


if __name__ == "__main__":  # pragma: no cover - manual entrypoint
    main()
