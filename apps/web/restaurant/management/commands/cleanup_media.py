"""
Remove media files that are no longer served.

Usage:
    uv run python apps/web/manage.py cleanup_media
    uv run python apps/web/manage.py cleanup_media --dry-run
    uv run python apps/web/manage.py cleanup_media --inactive-only
    uv run python apps/web/manage.py cleanup_media --orphaned-only

Deleting media or replacing a logo, favicon or cover only deactivates the
record. This command deletes those records with their files, then any file
under the media directory that no record points to. Run it from cron or by
hand; nothing schedules it.
"""

import logging
from typing import Any

from django.core.management.base import BaseCommand

from apps.web.restaurant.services import remove_inactive_media, remove_orphaned_media

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Delete inactive and orphaned restaurant media files"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List what would be removed without deleting anything",
        )
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--inactive-only",
            action="store_true",
            help="Only remove files of deactivated media records",
        )
        group.add_argument(
            "--orphaned-only",
            action="store_true",
            help="Only remove files without a media record",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        dry_run = options["dry_run"]
        verb = "would remove" if dry_run else "removed"
        inactive: list[str] = []
        orphaned: list[str] = []

        if not options["orphaned_only"]:
            inactive = remove_inactive_media(dry_run=dry_run)
            for name in inactive:
                self.stdout.write(f"  {verb} inactive: {name}")

        if not options["inactive_only"]:
            orphaned = remove_orphaned_media(dry_run=dry_run)
            for name in orphaned:
                self.stdout.write(f"  {verb} orphaned: {name}")

        if not dry_run:
            logger.info(
                "Media cleanup removed %d inactive and %d orphaned files",
                len(inactive),
                len(orphaned),
            )
        self.stdout.write(
            self.style.SUCCESS(
                f"Media cleanup complete: {len(inactive)} inactive, "
                f"{len(orphaned)} orphaned"
            )
        )
