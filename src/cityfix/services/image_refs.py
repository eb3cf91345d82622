"""Image reference resolution.

An image reference reaching the API or the client can take several shapes:

* a device-local URI (``file:///...``) that exists only on the phone,
* an absolute URL, either pointing back at this server's upload routes or at
  some external host,
* a server-relative upload path (``/uploads/<key>`` for the filesystem store,
  ``/api/uploads/<id>`` for the database store).

:func:`resolve_for_storage` turns any of these into the canonical form that
may be persisted on a report, and :func:`resolve_for_display` turns them into
a URL that can be fetched directly. Both use :func:`classify_reference` so the
two directions never disagree about what a string is.
"""

from __future__ import annotations

import logging
import re

from cityfix.errors.exceptions import UnuploadedLocalReferenceError
from cityfix.models.enums import ImageRefKind

logger = logging.getLogger(__name__)

LOCAL_DEVICE_SCHEMES = ("file://", "content://", "ph://", "assets-library://")

# "/api/uploads/" must be tried first: it contains "/uploads/".
UPLOAD_MARKERS = ("/api/uploads/", "/uploads/")

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def classify_reference(raw: str | None) -> ImageRefKind:
    """Return which representation *raw* is in; surrounding whitespace is ignored."""
    raw = _clean(raw)
    if not raw:
        return ImageRefKind.EMPTY
    lowered = raw.lower()
    if lowered.startswith(LOCAL_DEVICE_SCHEMES):
        return ImageRefKind.LOCAL_DEVICE
    if _ABSOLUTE_URL.match(raw):
        return ImageRefKind.ABSOLUTE_URL
    if raw.startswith(UPLOAD_MARKERS):
        return ImageRefKind.SERVER_RELATIVE
    return ImageRefKind.UNKNOWN


def _clean(raw: str | None) -> str:
    return raw.strip() if raw else ""


def _server_relative_part(url: str) -> str | None:
    for marker in UPLOAD_MARKERS:
        idx = url.find(marker)
        if idx != -1:
            return marker + url[idx + len(marker):]
    return None


def resolve_for_storage(raw: str | None) -> str | None:
    """Return the canonical storable form of *raw*, or None for "no image".

    Raises:
        UnuploadedLocalReferenceError: *raw* is a device-local URI; the caller
            must upload the image and persist the returned path instead.
    """
    raw = _clean(raw)
    kind = classify_reference(raw)

    if kind is ImageRefKind.EMPTY:
        return None

    if kind is ImageRefKind.LOCAL_DEVICE:
        logger.warning("Rejected device-local image reference: %s", raw)
        raise UnuploadedLocalReferenceError(raw)

    if kind is ImageRefKind.ABSOLUTE_URL:
        # Our own upload URLs are stored host-independent; anything else is external.
        return _server_relative_part(raw) or raw

    if kind is ImageRefKind.UNKNOWN:
        logger.warning("Storing image reference with unrecognised format: %s", raw)

    return raw


def resolve_for_display(raw: str | None, base_url: str) -> str | None:
    """Return a directly fetchable URL for *raw*, or None if it has none.

    Device-local URIs pass through unchanged so a picked photo can be previewed
    before upload. Unrecognised strings yield None and the caller shows a
    placeholder.
    """
    raw = _clean(raw)
    kind = classify_reference(raw)

    if kind in (ImageRefKind.ABSOLUTE_URL, ImageRefKind.LOCAL_DEVICE):
        return raw
    if kind is ImageRefKind.SERVER_RELATIVE:
        return f"{base_url.rstrip('/')}{raw}"
    if kind is ImageRefKind.UNKNOWN:
        logger.debug("No display URL for image reference: %s", raw)
    return None
