"""
Tests for the cleanup_media management command.
"""

from io import StringIO

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command

import pytest

from apps.web.restaurant import services
from apps.web.restaurant.models import RestaurantMedia

PNG_HEADER = b"\x89PNG\r\n\x1a\n"


def run(*args: str) -> str:
    out = StringIO()
    call_command("cleanup_media", *args, stdout=out)
    return out.getvalue()


def png(name: str = "logo.png") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, PNG_HEADER, content_type="image/png")


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    return tmp_path


@pytest.mark.django_db
class TestCleanupMedia:
    def test_removes_replaced_logo(self, restaurant, media_root):
        old = services.upload_media(restaurant, png(), "logo")
        new = services.upload_media(restaurant, png(), "logo")
        assert (media_root / old.file.name).exists()

        output = run()

        assert "1 inactive, 0 orphaned" in output
        assert not RestaurantMedia.objects.filter(pk=old.pk).exists()
        assert not (media_root / old.file.name).exists()
        assert (media_root / new.file.name).exists()

    def test_removes_deleted_media(self, restaurant, media_root):
        media = services.upload_media(restaurant, png("dish.png"), "gallery")
        services.delete_media(restaurant.pk, media.pk)

        run()

        assert not RestaurantMedia.objects.exists()
        assert not (media_root / media.file.name).exists()

    def test_removes_orphaned_files(self, restaurant, media_root):
        kept = services.upload_media(restaurant, png(), "logo")
        stray = default_storage.save(
            f"restaurants/{restaurant.pk}/gallery/stray.png", ContentFile(b"x")
        )
        unrelated = default_storage.save("exports/report.csv", ContentFile(b"x"))

        output = run()

        assert f"removed orphaned: {stray}" in output
        assert not (media_root / stray).exists()
        assert (media_root / kept.file.name).exists()
        assert (media_root / unrelated).exists()

    def test_dry_run_deletes_nothing(self, restaurant, media_root):
        old = services.upload_media(restaurant, png(), "logo")
        services.upload_media(restaurant, png(), "logo")
        stray = default_storage.save(
            f"restaurants/{restaurant.pk}/cover/stray.png", ContentFile(b"x")
        )

        output = run("--dry-run")

        assert f"would remove inactive: {old.file.name}" in output
        assert f"would remove orphaned: {stray}" in output
        assert RestaurantMedia.objects.filter(pk=old.pk).exists()
        assert (media_root / old.file.name).exists()
        assert (media_root / stray).exists()

    def test_inactive_only_leaves_orphans(self, restaurant, media_root):
        stray = default_storage.save(
            f"restaurants/{restaurant.pk}/logo/stray.png", ContentFile(b"x")
        )

        output = run("--inactive-only")

        assert "0 inactive, 0 orphaned" in output
        assert (media_root / stray).exists()

    def test_missing_media_directory(self, db):
        assert "0 inactive, 0 orphaned" in run()
