"""User domain model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """A marketplace user; customers and restaurant owners share this model."""

    id: int = Field(description="Auto-increment primary key")
    telegram_user_id: int = Field(description="Telegram user ID", gt=0)
    telegram_username: Optional[str] = Field(default=None, max_length=100)
    name: str = Field(min_length=1, max_length=200)
    email: Optional[str] = Field(default=None, max_length=320)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class UserInput(BaseModel):
    """Input model for user creation."""

    telegram_user_id: int = Field(gt=0)
    telegram_username: Optional[str] = None
    name: str = Field(min_length=1, max_length=200)
    email: Optional[str] = None
