"""Tests for image reference classification and resolution."""

import pytest

from cityfix.errors.exceptions import UnuploadedLocalReferenceError
from cityfix.models.enums import ImageRefKind
from cityfix.services.image_refs import (
    classify_reference,
    resolve_for_display,
    resolve_for_storage,
)

BASE = "http://api.example.org"


@pytest.mark.parametrize(
    "raw,kind",
    [
        (None, ImageRefKind.EMPTY),
        ("", ImageRefKind.EMPTY),
        ("   ", ImageRefKind.EMPTY),
        ("file:///data/user/0/cache/photo.jpg", ImageRefKind.LOCAL_DEVICE),
        ("content://media/external/images/42", ImageRefKind.LOCAL_DEVICE),
        ("https://cdn.example.org/a.png", ImageRefKind.ABSOLUTE_URL),
        ("/api/uploads/img_abc", ImageRefKind.SERVER_RELATIVE),
        ("/uploads/image-1-2.jpg", ImageRefKind.SERVER_RELATIVE),
        ("photos/a.jpg", ImageRefKind.UNKNOWN),
        (" file:///tmp/photo.jpg", ImageRefKind.LOCAL_DEVICE),
        ("\tfile:///tmp/photo.jpg", ImageRefKind.LOCAL_DEVICE),
        ("  content://media/1", ImageRefKind.LOCAL_DEVICE),
        ("\n/api/uploads/img_abc ", ImageRefKind.SERVER_RELATIVE),
    ],
)
def test_classify_reference(raw, kind):
    assert classify_reference(raw) is kind


class TestResolveForStorage:
    def test_empty_means_no_image(self):
        assert resolve_for_storage(None) is None
        assert resolve_for_storage("") is None

    def test_local_device_reference_rejected(self):
        with pytest.raises(UnuploadedLocalReferenceError) as exc_info:
            resolve_for_storage("file:///tmp/photo.jpg")
        assert exc_info.value.status_code == 400
        assert "upload the image first" in exc_info.value.message

    @pytest.mark.parametrize("raw", [" file:///tmp/photo.jpg", "\tfile:///tmp/photo.jpg", "  content://media/1\n"])
    def test_padded_local_device_reference_rejected(self, raw):
        with pytest.raises(UnuploadedLocalReferenceError):
            resolve_for_storage(raw)

    def test_padding_is_stripped(self):
        assert resolve_for_storage("  /api/uploads/img_1\n") == "/api/uploads/img_1"
        assert resolve_for_storage(" https://host/api/uploads/img_2") == "/api/uploads/img_2"

    def test_own_absolute_url_is_canonicalised(self):
        assert resolve_for_storage("https://host:5000/api/uploads/img_123") == "/api/uploads/img_123"
        assert resolve_for_storage("http://10.0.2.2:5000/uploads/image-1-2.jpg") == "/uploads/image-1-2.jpg"

    def test_api_marker_wins_over_plain_uploads(self):
        # "/api/uploads/" contains "/uploads/"; the longer marker must be kept
        assert resolve_for_storage("http://h/api/uploads/x") == "/api/uploads/x"

    def test_external_url_passes_through(self):
        url = "https://images.example.org/pothole.png"
        assert resolve_for_storage(url) == url

    def test_server_relative_passes_through(self):
        assert resolve_for_storage("/api/uploads/img_1") == "/api/uploads/img_1"

    def test_unknown_format_passes_through(self):
        assert resolve_for_storage("photos/a.jpg") == "photos/a.jpg"

    def test_canonical_path_is_fixed_point(self):
        once = resolve_for_storage("https://host/api/uploads/img_9")
        assert resolve_for_storage(once) == once


class TestResolveForDisplay:
    def test_empty_is_none(self):
        assert resolve_for_display(None, BASE) is None
        assert resolve_for_display("", BASE) is None

    def test_absolute_unchanged(self):
        assert resolve_for_display("https://x.org/a.png", BASE) == "https://x.org/a.png"

    def test_server_relative_gets_base_url(self):
        assert resolve_for_display("/api/uploads/img_1", BASE) == f"{BASE}/api/uploads/img_1"
        assert resolve_for_display("/uploads/k.jpg", BASE + "/") == f"{BASE}/uploads/k.jpg"
        assert resolve_for_display(" /api/uploads/img_1\t", BASE) == f"{BASE}/api/uploads/img_1"

    def test_local_device_kept_for_preview(self):
        assert resolve_for_display("file:///tmp/a.jpg", BASE) == "file:///tmp/a.jpg"

    def test_unknown_is_none(self):
        assert resolve_for_display("photos/a.jpg", BASE) is None
