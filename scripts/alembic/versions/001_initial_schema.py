"""Initial schema with users, restaurants, offers, claims, reservations, newsletters

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial database schema."""
    # Create enum types
    op.execute("CREATE TYPE claimstatus AS ENUM ('CLAIMED', 'REDEEMED', 'EXPIRED')")
    op.execute("CREATE TYPE reservationstatus AS ENUM ('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED')")

    # Create users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('telegram_user_id', sa.BigInteger(), nullable=False),
        sa.Column('telegram_username', sa.String(length=100), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_telegram_user_id', 'users', ['telegram_user_id'], unique=True)

    # Create restaurants table
    op.create_table(
        'restaurants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('cuisine', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=300), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('hours', sa.String(length=200), nullable=True),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('review_count', sa.Integer(), nullable=False),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('rating >= 0 AND rating <= 5', name='check_rating_range'),
        sa.CheckConstraint('latitude IS NULL OR (latitude >= -90 AND latitude <= 90)', name='check_latitude_range'),
        sa.CheckConstraint('longitude IS NULL OR (longitude >= -180 AND longitude <= 180)', name='check_longitude_range'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_restaurants_owner_id', 'restaurants', ['owner_id'])
    op.create_index('ix_restaurants_cuisine', 'restaurants', ['cuisine'])
    op.create_index('ix_restaurants_location', 'restaurants', ['latitude', 'longitude'])
    op.create_index('ix_restaurants_created_at', 'restaurants', ['created_at'])

    # Create offers table
    op.create_table(
        'offers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('original_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discounted_price', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('discount', sa.Integer(), nullable=False),
        sa.Column('terms', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('original_price > 0', name='check_positive_original_price'),
        sa.CheckConstraint('discounted_price < original_price', name='check_discounted_below_original'),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='check_discount_range'),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_offers_restaurant_id', 'offers', ['restaurant_id'])
    op.create_index('ix_offers_active_expires', 'offers', ['is_active', 'expires_at'])
    op.create_index('ix_offers_created_at', 'offers', [sa.text('created_at DESC')])
    op.create_index('ix_offers_discount', 'offers', ['discount'])

    # Create claimed_deals table
    op.create_table(
        'claimed_deals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('offer_id', sa.Integer(), nullable=False),
        sa.Column('redemption_code', sa.String(length=8), nullable=False),
        sa.Column('status', postgresql.ENUM('CLAIMED', 'REDEEMED', 'EXPIRED', name='claimstatus', create_type=False), nullable=False),
        sa.Column('claimed_at', sa.DateTime(), nullable=False),
        sa.Column('redeemed_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['offer_id'], ['offers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_claimed_deals_redemption_code', 'claimed_deals', ['redemption_code'], unique=True)
    op.create_index(
        'ix_claimed_deals_user_offer_active', 'claimed_deals', ['user_id', 'offer_id'],
        unique=True, postgresql_where=sa.text("status IN ('CLAIMED', 'REDEEMED')")
    )
    op.create_index('ix_claimed_deals_user_claimed', 'claimed_deals', ['user_id', sa.text('claimed_at DESC')])

    # Create reservations table
    op.create_table(
        'reservations',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('restaurant_id', sa.Integer(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('time', sa.String(length=10), nullable=False),
        sa.Column('party_size', sa.Integer(), nullable=False),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.Column('phone_number', sa.String(length=30), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=True),
        sa.Column('status', postgresql.ENUM('PENDING', 'CONFIRMED', 'CANCELLED', 'COMPLETED', name='reservationstatus', create_type=False), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('party_size >= 1 AND party_size <= 20', name='check_party_size_range'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reservations_user_date', 'reservations', ['user_id', sa.text('date DESC')])
    op.create_index('ix_reservations_restaurant_id', 'reservations', ['restaurant_id'])
    op.create_index('ix_reservations_status', 'reservations', ['status'])

    # Create newsletter tables
    op.create_table(
        'newsletter_subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_newsletter_subscriptions_email', 'newsletter_subscriptions', ['email'], unique=True)
    op.create_index('ix_newsletter_subscriptions_active', 'newsletter_subscriptions', ['is_active'])

    op.create_table(
        'newsletters',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('subject', sa.String(length=200), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('html_content', sa.Text(), nullable=True),
        sa.Column('created_by', sa.BigInteger(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('sent_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_newsletters_created_at', 'newsletters', ['created_at'])


def downgrade() -> None:
    """Drop all tables and enum types."""
    op.drop_index('ix_newsletters_created_at', table_name='newsletters')
    op.drop_table('newsletters')

    op.drop_index('ix_newsletter_subscriptions_active', table_name='newsletter_subscriptions')
    op.drop_index('ix_newsletter_subscriptions_email', table_name='newsletter_subscriptions')
    op.drop_table('newsletter_subscriptions')

    op.drop_index('ix_reservations_status', table_name='reservations')
    op.drop_index('ix_reservations_restaurant_id', table_name='reservations')
    op.drop_index('ix_reservations_user_date', table_name='reservations')
    op.drop_table('reservations')

    op.drop_index('ix_claimed_deals_user_claimed', table_name='claimed_deals')
    op.drop_index('ix_claimed_deals_user_offer_active', table_name='claimed_deals')
    op.drop_index('ix_claimed_deals_redemption_code', table_name='claimed_deals')
    op.drop_table('claimed_deals')

    op.drop_index('ix_offers_discount', table_name='offers')
    op.drop_index('ix_offers_created_at', table_name='offers')
    op.drop_index('ix_offers_active_expires', table_name='offers')
    op.drop_index('ix_offers_restaurant_id', table_name='offers')
    op.drop_table('offers')

    op.drop_index('ix_restaurants_created_at', table_name='restaurants')
    op.drop_index('ix_restaurants_location', table_name='restaurants')
    op.drop_index('ix_restaurants_cuisine', table_name='restaurants')
    op.drop_index('ix_restaurants_owner_id', table_name='restaurants')
    op.drop_table('restaurants')

    op.drop_index('ix_users_telegram_user_id', table_name='users')
    op.drop_table('users')

    op.execute("DROP TYPE reservationstatus")
    op.execute("DROP TYPE claimstatus")
