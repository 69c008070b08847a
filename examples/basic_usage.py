#!/usr/bin/env python3
"""
Basic Usage Example - SMK collection loader

This script loads the SMK collection through a DataSession. It shows how to:
- Configure logging and load configuration
- Record storage consent
- Register a lazily activated consumer
- Load from the API (or the local cache on a second run)

Run: python examples/basic_usage.py [--accept | --decline]
"""

import asyncio
import sys

from smk_app.config import ConfigLoader
from smk_app.data.models import Gender
from smk_app.data.normalizer import group_by_year
from smk_app.engine import DataSession
from smk_app.logging import configure_logging
from smk_app.scheduling import ThresholdReadiness


def print_acquisitions(snapshot):
    """Consumer: acquisitions per year for women artists."""
    by_year = group_by_year(snapshot, Gender.FEMALE)
    recent = sorted(by_year.items())[-5:]
    print(f"{len(snapshot):,} artworks so far; recent acquisitions by women: {recent}")


async def main(argv):
    configure_logging(level="INFO")
    config = ConfigLoader.create().load()

    session = DataSession(config=config)

    if "--accept" in argv:
        session.consent.accept()
    elif "--decline" in argv:
        session.consent.decline()

    # Simulate a chart scrolling into view
    readiness = ThresholdReadiness.from_config(config.activation)
    session.register_consumer("acquisitions", readiness, print_acquisitions)
    readiness.report(1.0)

    try:
        await session.start()
    finally:
        await session.close()

    status = session.status
    if status.active_errors:
        for notice in status.active_errors:
            print(f"Error: {notice.message}")
    else:
        print(status.success_message)
    if status.cache_info:
        print(status.cache_info)


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1:]))
