"""PostgreSQL repository for User entities."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mealdeal.logging import get_logger
from mealdeal.models.user import User, UserInput
from mealdeal.storage.db_models import UserTable
from mealdeal.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresUserRepository(RepositoryBase[User]):
    """User repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: int) -> Optional[User]:
        """Retrieve user by ID."""
        db_user = await self.session.get(UserTable, id)
        return self._to_domain_model(db_user) if db_user else None

    async def get_by_telegram_id(self, telegram_user_id: int) -> Optional[User]:
        """Retrieve user by Telegram user ID."""
        stmt = select(UserTable).where(UserTable.telegram_user_id == telegram_user_id)
        result = await self.session.execute(stmt)
        db_user = result.scalar_one_or_none()
        return self._to_domain_model(db_user) if db_user else None

    async def create(self, entity: UserInput) -> User:
        """Create new user."""
        db_user = UserTable(
            telegram_user_id=entity.telegram_user_id,
            telegram_username=entity.telegram_username,
            name=entity.name,
            email=entity.email,
        )
        self.session.add(db_user)
        await self.session.flush()

        logger.info(
            "user_created",
            user_id=db_user.id,
            telegram_user_id=entity.telegram_user_id,
        )

        return self._to_domain_model(db_user)

    async def get_or_create(self, entity: UserInput) -> User:
        """Return the user for a Telegram account, registering it on first use."""
        existing = await self.get_by_telegram_id(entity.telegram_user_id)
        if existing:
            return existing
        return await self.create(entity)

    async def update_email(self, user_id: int, email: Optional[str]) -> User:
        """Set the contact email used for reservations."""
        db_user = await self.session.get(UserTable, user_id)
        if not db_user:
            raise ValueError(f"User not found: {user_id}")

        db_user.email = email
        await self.session.flush()

        logger.info("user_email_updated", user_id=user_id)

        return self._to_domain_model(db_user)

    def _to_domain_model(self, db_user: UserTable) -> User:
        """Convert database model to domain model."""
        return User(
            id=db_user.id,
            telegram_user_id=db_user.telegram_user_id,
            telegram_username=db_user.telegram_username,
            name=db_user.name,
            email=db_user.email,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at,
        )
