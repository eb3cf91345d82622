"""Configuration for the CityFix client library."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ClientConfig(BaseModel):
    """Where the client talks to, and how it prepares images."""

    api_url: str = "http://localhost:5000/api"
    base_url: str = "http://localhost:5000"
    classifier_url: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_image_bytes: int = Field(default=5 * 1024 * 1024, gt=0)
    max_image_width: int = Field(default=1600, gt=0)
