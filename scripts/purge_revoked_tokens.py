#!/usr/bin/env python3
"""Maintenance entrypoint for pruning the token revocation set.

Entries are only needed until the revoked token's own expiry; the API
prunes opportunistically on logout, this script does it on demand.

Usage:
    # Single pass
    python scripts/purge_revoked_tokens.py

    # Continuous loop (Ctrl+C to stop)
    python scripts/purge_revoked_tokens.py --loop --interval 3600

Environment variables:
    DATABASE_URL: Store connection string (required)
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlmodel import Session

import app.models  # noqa: F401
from app.db.session import engine
from app.logging_config import configure_logging
from app.services.tokens import purge_expired_revocations


def run_once() -> int:
    """Purge expired entries once and return how many were removed."""
    with Session(engine) as session:
        return purge_expired_revocations(session)


def main() -> int:
    """Main entrypoint for the purge script."""
    parser = argparse.ArgumentParser(
        description="Remove expired entries from the token revocation set",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--loop",
        action="store_true",
        help="Keep purging every --interval seconds",
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=3600,
        help="Seconds between passes (loop mode only)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args()

    configure_logging(logging.DEBUG if args.verbose else logging.INFO)
    logger = logging.getLogger(__name__)

    try:
        while True:
            removed = run_once()
            logger.info(f"Purged {removed} expired revocation entries")
            if not args.loop:
                return 0
            time.sleep(args.interval)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Purge failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
