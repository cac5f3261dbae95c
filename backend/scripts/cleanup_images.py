"""Sweep expired temporary images.

Usage:
  python scripts/cleanup_images.py            # dry-run
  python scripts/cleanup_images.py --apply    # delete expired files
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import settings
from app.services.janitor import Janitor
from app.services.storage import build_storage


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Actually delete expired files")
    parser.add_argument(
        "--retention-minutes",
        type=int,
        default=settings.RETENTION_MINUTES,
        help="Maximum file age in minutes",
    )
    args = parser.parse_args(argv)

    janitor = Janitor(build_storage(settings), retention_minutes=args.retention_minutes)
    result = janitor.sweep_all(dry_run=not args.apply)

    print("Temporary image cleanup result")
    print(f"  dry_run: {result.dry_run}")
    print(f"  scanned_count: {result.scanned_count}")
    print(f"  expired_count: {len(result.expired)}")
    print(f"  deleted_count: {result.deleted_count}")
    print(f"  failed_count: {result.failed_count}")
    if result.expired:
        print("  expired:")
        for name in result.expired:
            print(f"    - {name}")
    return result


if __name__ == "__main__":
    main()
