"""Newsletter domain models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class NewsletterSubscription(BaseModel):
    """An email address subscribed to the newsletter."""

    id: int
    email: str = Field(max_length=320)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class Newsletter(BaseModel):
    """A broadcast newsletter record."""

    id: int
    subject: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    html_content: Optional[str] = None
    created_by: int
    sent_at: Optional[datetime] = None
    sent_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class NewsletterStats(BaseModel):
    """Subscriber and broadcast counters."""

    total_subscribers: int = 0
    active_subscribers: int = 0
    total_newsletters: int = 0
    recent_newsletters: list[Newsletter] = Field(default_factory=list)
