"""Prefixed identifiers for users, reports and stored images."""

import secrets

USER_PREFIX = "usr_"
REPORT_PREFIX = "rpt_"
IMAGE_PREFIX = "img_"


def generate_id(prefix: str) -> str:
    """Return ``{prefix}`` plus 16 random hex chars, e.g. ``rpt_a1b2c3d4e5f6a7b8``."""
    return f"{prefix}{secrets.token_hex(8)}"
