"""Repository for binary image documents."""

from cityfix.db.models.image import ImageRow
from cityfix.repositories.base import BaseRepository


class ImageRepository(BaseRepository[ImageRow]):
    model = ImageRow
    pk_field = "image_id"
