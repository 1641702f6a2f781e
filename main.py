import argparse
import logging
from dataclasses import replace

from slotbot.config import load_settings
from slotbot.worker import run_check_once


def _setup_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Sporttia court slot notifier")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show all free slots and write the email to the preview file instead of sending it",
    )
    parser.add_argument("--days", type=int, default=None, help="Override HORIZON_DAYS")
    args = parser.parse_args()

    _setup_logging()
    logger = logging.getLogger(__name__)

    settings = load_settings(dry_run=args.dry_run)
    if args.days is not None:
        if args.days < 1:
            parser.error("--days must be >= 1")
        settings = replace(settings, horizon_days=args.days)

    if args.dry_run:
        logger.info("Running in dry-run mode: filters bypassed, email saved to %s", settings.preview_path)

    logger.info("Checker started. Checking %s", settings.base_url)
    result = run_check_once(settings, dry_run=args.dry_run)
    logger.info("Check completed: %s slot(s)", result.slot_count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
