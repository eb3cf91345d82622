"""Repository for User records."""

from sqlalchemy import select

from cityfix.db.models.user import UserRow
from cityfix.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserRow]):
    model = UserRow
    pk_field = "user_id"

    async def get_by_email(self, email: str) -> UserRow | None:
        """Emails are stored lower-cased; lookups are case-insensitive."""
        stmt = select(UserRow).where(UserRow.email == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
