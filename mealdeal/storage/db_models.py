"""SQLAlchemy database models.

Maps domain models to PostgreSQL tables.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship

from mealdeal.models.claimed_deal import BLOCKING_CLAIM_STATUSES, ClaimStatus
from mealdeal.models.reservation import ReservationStatus


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class UserTable(Base):
    """User entity table."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    telegram_user_id = Column(BigInteger, nullable=False)
    telegram_username = Column(String(100), nullable=True)
    name = Column(String(200), nullable=False)
    email = Column(String(320), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurants = relationship("RestaurantTable", back_populates="owner")
    claimed_deals = relationship("ClaimedDealTable", back_populates="user")
    reservations = relationship("ReservationTable", back_populates="user")

    __table_args__ = (
        Index("ix_users_telegram_user_id", telegram_user_id, unique=True),
    )


class RestaurantTable(Base):
    """Restaurant entity table."""

    __tablename__ = "restaurants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(200), nullable=False)
    cuisine = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(300), nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    phone = Column(String(30), nullable=True)
    hours = Column(String(200), nullable=True)
    rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)
    image = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("UserTable", back_populates="restaurants")
    offers = relationship("OfferTable", back_populates="restaurant", cascade="all, delete-orphan")
    reservations = relationship("ReservationTable", back_populates="restaurant", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="check_rating_range"),
        CheckConstraint("latitude IS NULL OR (latitude >= -90 AND latitude <= 90)", name="check_latitude_range"),
        CheckConstraint("longitude IS NULL OR (longitude >= -180 AND longitude <= 180)", name="check_longitude_range"),
        Index("ix_restaurants_owner_id", owner_id),
        Index("ix_restaurants_cuisine", cuisine),
        Index("ix_restaurants_location", latitude, longitude),
    )


class OfferTable(Base):
    """Offer entity table."""

    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    original_price = Column(Numeric(10, 2), nullable=False)
    discounted_price = Column(Numeric(10, 2), nullable=False)
    discount = Column(Integer, nullable=False)
    terms = Column(Text, nullable=True)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = relationship("RestaurantTable", back_populates="offers")
    claimed_deals = relationship("ClaimedDealTable", back_populates="offer", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("original_price > 0", name="check_positive_original_price"),
        CheckConstraint("discounted_price < original_price", name="check_discounted_below_original"),
        CheckConstraint("discount >= 0 AND discount <= 100", name="check_discount_range"),
        Index("ix_offers_restaurant_id", restaurant_id),
        Index("ix_offers_active_expires", is_active, expires_at),
        Index("ix_offers_created_at", created_at.desc()),
        Index("ix_offers_discount", discount),
    )


class ClaimedDealTable(Base):
    """Claimed deal table."""

    __tablename__ = "claimed_deals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    offer_id = Column(Integer, ForeignKey("offers.id", ondelete="CASCADE"), nullable=False)
    redemption_code = Column(String(8), nullable=False)
    status = Column(
        Enum(ClaimStatus, native_enum=True),
        nullable=False,
        default=ClaimStatus.CLAIMED,
    )
    claimed_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    redeemed_at = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)

    # Relationships
    user = relationship("UserTable", back_populates="claimed_deals")
    offer = relationship("OfferTable", back_populates="claimed_deals")

    __table_args__ = (
        Index("ix_claimed_deals_redemption_code", redemption_code, unique=True),
        Index(
            "ix_claimed_deals_user_offer_active",
            user_id,
            offer_id,
            unique=True,
            postgresql_where=status.in_(BLOCKING_CLAIM_STATUSES),
        ),
        Index("ix_claimed_deals_user_claimed", user_id, claimed_at.desc()),
    )


class ReservationTable(Base):
    """Table reservation table."""

    __tablename__ = "reservations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    date = Column(DateTime, nullable=False)
    time = Column(String(10), nullable=False)
    party_size = Column(Integer, nullable=False)
    special_requests = Column(Text, nullable=True)
    phone_number = Column(String(30), nullable=True)
    email = Column(String(320), nullable=True)
    status = Column(
        Enum(ReservationStatus, native_enum=True),
        nullable=False,
        default=ReservationStatus.PENDING,
    )
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("UserTable", back_populates="reservations")
    restaurant = relationship("RestaurantTable", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("party_size >= 1 AND party_size <= 20", name="check_party_size_range"),
        Index("ix_reservations_user_date", user_id, date.desc()),
        Index("ix_reservations_restaurant_id", restaurant_id),
        Index("ix_reservations_status", status),
    )


class NewsletterSubscriptionTable(Base):
    """Newsletter subscription table."""

    __tablename__ = "newsletter_subscriptions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_newsletter_subscriptions_email", email, unique=True),
        Index("ix_newsletter_subscriptions_active", is_active),
    )


class NewsletterTable(Base):
    """Sent newsletter table."""

    __tablename__ = "newsletters"

    id = Column(Integer, primary_key=True, autoincrement=True)
    subject = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    html_content = Column(Text, nullable=True)
    created_by = Column(BigInteger, nullable=False)
    sent_at = Column(DateTime, nullable=True)
    sent_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
