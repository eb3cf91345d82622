"""Pydantic models for image upload responses."""

from cityfix.models.common import CamelModel


class UploadResponse(CamelModel):
    success: bool = True
    image_path: str
    message: str = "Image uploaded successfully"
