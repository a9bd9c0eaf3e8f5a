"""
Horizon — Entry Point.

Single entry point: `python main.py <user_id>` prints that user's dashboard.
"""

import logging
import sys

from src.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.cli import main

if __name__ == "__main__":
    sys.exit(main())
