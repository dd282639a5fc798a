"""Demo data: eight restaurants and their offers.

Run with ``python -m mealdeal.storage.seed`` against an empty database.
"""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select

from mealdeal.config import load_settings
from mealdeal.logging import get_logger, setup_logging
from mealdeal.models.offer import Offer
from mealdeal.models.restaurant import Restaurant
from mealdeal.storage.database import Database
from mealdeal.storage.db_models import OfferTable, RestaurantTable, UserTable

logger = get_logger(__name__)

DEMO_OWNER_TELEGRAM_ID = 1000000001

RESTAURANTS: list[dict[str, Any]] = [
    {
        "name": "Bella Vista",
        "cuisine": "Italian",
        "description": "Authentic Italian cuisine in an elegant atmosphere, with recipes passed down through generations.",
        "location": "123 Main St, Downtown",
        "latitude": 40.7128,
        "longitude": -74.0060,
        "phone": "(555) 123-4567",
        "hours": "Mon-Sun: 11:00 AM - 10:00 PM",
        "rating": 4.8,
        "review_count": 324,
    },
    {
        "name": "Sakura Sushi",
        "cuisine": "Japanese",
        "description": "Japanese sushi bar with the freshest fish and traditional techniques.",
        "location": "456 Cherry Blossom Ave, Midtown",
        "latitude": 40.7549,
        "longitude": -73.9840,
        "phone": "(555) 234-5678",
        "hours": "Tue-Sun: 5:00 PM - 11:00 PM",
        "rating": 4.6,
        "review_count": 198,
    },
    {
        "name": "Urban Grill",
        "cuisine": "American",
        "description": "Modern American cuisine with locally sourced ingredients, gourmet burgers and craft beer.",
        "location": "789 Liberty St, West Side",
        "latitude": 40.7336,
        "longitude": -74.0086,
        "phone": "(555) 345-6789",
        "hours": "Mon-Sun: 12:00 PM - 10:00 PM",
        "rating": 4.4,
        "review_count": 156,
    },
    {
        "name": "Spice Route",
        "cuisine": "Indian",
        "description": "Traditional Indian curry house. Vegetarian and vegan options available.",
        "location": "321 Curry Lane, East Village",
        "latitude": 40.7265,
        "longitude": -73.9815,
        "phone": "(555) 456-7890",
        "hours": "Mon-Sun: 11:30 AM - 9:30 PM",
        "rating": 4.7,
        "review_count": 267,
    },
    {
        "name": "Ocean Fresh",
        "cuisine": "Hawaiian",
        "description": "Fresh poke bowls and Hawaiian-inspired dishes made with sustainable seafood.",
        "location": "654 Beach Blvd, Beachside",
        "latitude": 40.5755,
        "longitude": -73.9707,
        "phone": "(555) 567-8901",
        "hours": "Mon-Sun: 10:00 AM - 9:00 PM",
        "rating": 4.5,
        "review_count": 89,
    },
    {
        "name": "Smoky Joe's BBQ",
        "cuisine": "BBQ",
        "description": "Texas-style BBQ with slow-smoked meats and homemade sides.",
        "location": "987 Smokehouse Rd, Southside",
        "latitude": None,
        "longitude": None,
        "phone": "(555) 678-9012",
        "hours": "Wed-Sun: 11:00 AM - 9:00 PM",
        "rating": 4.3,
        "review_count": 203,
    },
    {
        "name": "Noodle Bar Tokyo",
        "cuisine": "Japanese",
        "description": "Ramen bar specializing in tonkotsu, miso and shoyu broths.",
        "location": "159 Ramen St, Little Tokyo",
        "latitude": 34.0505,
        "longitude": -118.2400,
        "phone": "(555) 789-0123",
        "hours": "Mon-Sat: 6:00 PM - 12:00 AM",
        "rating": 4.6,
        "review_count": 145,
    },
    {
        "name": "La Cantina Mexicana",
        "cuisine": "Mexican",
        "description": "Traditional Mexican dishes with modern twists and tableside guacamole.",
        "location": "753 Fiesta Way, Mexican Quarter",
        "latitude": None,
        "longitude": None,
        "phone": "(555) 890-1234",
        "hours": "Mon-Sun: 11:00 AM - 11:00 PM",
        "rating": 4.2,
        "review_count": 178,
    },
]

# restaurant is an index into RESTAURANTS; expires_in_days is relative to seeding time
OFFERS: list[dict[str, Any]] = [
    {
        "restaurant": 0,
        "title": "3-Course Italian Dinner for Two",
        "description": "Appetizer, main course and dessert. Perfect for a romantic evening.",
        "original_price": "120.00",
        "discounted_price": "60.00",
        "discount": 50,
        "terms": "Valid for dinner only. Reservations required.",
        "expires_in_days": 7,
    },
    {
        "restaurant": 0,
        "title": "Wine Tasting Experience",
        "description": "Six premium Italian wines with cheese and charcuterie pairing.",
        "original_price": "85.00",
        "discounted_price": "55.00",
        "discount": 35,
        "terms": "Weekends only. Must be 21+.",
        "expires_in_days": 14,
    },
    {
        "restaurant": 1,
        "title": "All-You-Can-Eat Sushi",
        "description": "Unlimited nigiri, sashimi and rolls for 2 hours. Fresh fish daily.",
        "original_price": "80.00",
        "discounted_price": "56.00",
        "discount": 30,
        "terms": "Time limit 2 hours. No sharing.",
        "expires_in_days": 5,
    },
    {
        "restaurant": 1,
        "title": "Omakase Experience",
        "description": "Chef's choice premium course with 12 pieces and miso soup.",
        "original_price": "150.00",
        "discounted_price": "105.00",
        "discount": 30,
        "terms": "Chef's selection only.",
        "expires_in_days": 10,
    },
    {
        "restaurant": 2,
        "title": "Gourmet Burger & Craft Beer",
        "description": "Premium beef burger with fries and a craft beer of your choice.",
        "original_price": "32.00",
        "discounted_price": "24.00",
        "discount": 25,
        "terms": "One beer per person. Must be 21+ for alcohol.",
        "expires_in_days": 3,
    },
    {
        "restaurant": 3,
        "title": "Authentic Butter Chicken & Naan",
        "description": "Signature butter chicken with basmati rice, naan bread and chai tea.",
        "original_price": "45.00",
        "discounted_price": "27.00",
        "discount": 40,
        "terms": "Spice level can be adjusted.",
        "expires_in_days": 8,
    },
    {
        "restaurant": 3,
        "title": "Vegetarian Thali Special",
        "description": "Complete vegetarian meal with 6 dishes, rice, bread and dessert.",
        "original_price": "38.00",
        "discounted_price": "23.00",
        "discount": 40,
        "terms": "Vegan options available upon request.",
        "expires_in_days": 12,
    },
    {
        "restaurant": 4,
        "title": "Fresh Poke Bowl & Smoothie",
        "description": "Build your own poke bowl with premium fish and a tropical smoothie.",
        "original_price": "28.00",
        "discounted_price": "18.00",
        "discount": 36,
        "terms": "Choice of ahi tuna or salmon.",
        "expires_in_days": 4,
    },
    {
        "restaurant": 5,
        "title": "BBQ Ribs Feast for Family",
        "description": "Full rack of ribs with 3 sides and cornbread. Serves 3-4 people.",
        "original_price": "85.00",
        "discounted_price": "47.00",
        "discount": 45,
        "terms": "Take-out available.",
        "expires_in_days": 9,
    },
    {
        "restaurant": 6,
        "title": "Authentic Ramen & Gyoza",
        "description": "Tonkotsu, miso or shoyu ramen with 5-piece pork gyoza.",
        "original_price": "35.00",
        "discounted_price": "28.00",
        "discount": 20,
        "terms": "No modifications to broth.",
        "expires_in_days": 6,
    },
    {
        "restaurant": 7,
        "title": "Taco Tuesday Special",
        "description": "3 street tacos with rice, beans and a margarita.",
        "original_price": "25.00",
        "discounted_price": "18.00",
        "discount": 28,
        "terms": "Tuesdays only. Must be 21+ for margarita.",
        "expires_in_days": 11,
    },
    {
        "restaurant": 7,
        "title": "Fajitas Fiesta for Two",
        "description": "Sizzling chicken and beef fajitas with all the fixings for two.",
        "original_price": "55.00",
        "discounted_price": "39.00",
        "discount": 29,
        "terms": "Includes guacamole and unlimited tortillas.",
        "expires_in_days": 15,
    },
    {
        "restaurant": 1,
        "title": "Happy Hour Nigiri Set",
        "description": "Eight pieces of seasonal nigiri with a glass of sake.",
        "original_price": "40.00",
        "discounted_price": "34.00",
        "discount": 15,
        "terms": "Weekdays 5-7 PM.",
        "expires_in_days": 2,
    },
    {
        "restaurant": 2,
        "title": "Weekend Brunch Stack",
        "description": "Pancakes, eggs any style, bacon and bottomless coffee.",
        "original_price": "50.00",
        "discounted_price": "30.00",
        "discount": 40,
        "terms": "Saturdays and Sundays until 2 PM.",
        "expires_in_days": 6,
    },
    {
        "restaurant": 3,
        "title": "Tandoori Mixed Grill",
        "description": "Chicken tikka, lamb seekh kebab and tandoori prawns.",
        "original_price": "60.00",
        "discounted_price": "47.00",
        "discount": 22,
        "terms": "Dine-in only.",
        "expires_in_days": 9,
    },
    {
        "restaurant": 4,
        "title": "Sunset Seafood Platter",
        "description": "Grilled mahi-mahi, garlic shrimp and coconut rice for two.",
        "original_price": "90.00",
        "discounted_price": "45.00",
        "discount": 50,
        "terms": "Served after 6 PM.",
        "expires_in_days": 13,
    },
    {
        "restaurant": 5,
        "title": "Brisket Sandwich Lunch",
        "description": "Smoked brisket sandwich with slaw and a soft drink.",
        "original_price": "20.00",
        "discounted_price": "14.00",
        "discount": 30,
        "terms": "Lunch hours only.",
        "expires_in_days": 5,
    },
    {
        "restaurant": 6,
        "title": "Late Night Ramen",
        "description": "Any ramen bowl after 10 PM.",
        "original_price": "20.00",
        "discounted_price": "18.00",
        "discount": 10,
        "terms": "From 10 PM to closing.",
        "expires_in_days": 20,
    },
    {
        "restaurant": 7,
        "title": "Churros & Coffee",
        "description": "Cinnamon churros with chocolate sauce and cafe de olla.",
        "original_price": "15.00",
        "discounted_price": "10.00",
        "discount": 33,
        "terms": "Dessert menu only.",
        "expires_in_days": 7,
    },
    {
        "restaurant": 2,
        "title": "Steak Night",
        "description": "Ribeye steak with two sides.",
        "original_price": "110.00",
        "discounted_price": "60.00",
        "discount": 45,
        "terms": "Thursdays only.",
        "expires_in_days": -1,
    },
    {
        "restaurant": 4,
        "title": "Tiki Bar Special",
        "description": "Two tropical cocktails with pupu platter.",
        "original_price": "40.00",
        "discounted_price": "26.00",
        "discount": 35,
        "terms": "Must be 21+.",
        "expires_in_days": 10,
        "is_active": False,
    },
    {
        "restaurant": 3,
        "title": "Curry Masterclass",
        "description": "Hands-on cooking class followed by a three-course curry dinner.",
        "original_price": "100.00",
        "discounted_price": "40.00",
        "discount": 60,
        "terms": "Book 48 hours ahead.",
        "expires_in_days": 21,
    },
]


def demo_restaurants(now: datetime, owner_id: int = 1) -> list[Restaurant]:
    """Demo restaurants as domain models with ids 1..8, oldest first."""
    restaurants = []
    for index, data in enumerate(RESTAURANTS):
        created = now - timedelta(days=30) + timedelta(hours=index)
        restaurants.append(
            Restaurant(
                id=index + 1,
                owner_id=owner_id,
                created_at=created,
                updated_at=created,
                live_offer_count=sum(
                    1
                    for offer in OFFERS
                    if offer["restaurant"] == index
                    and offer.get("is_active", True)
                    and offer["expires_in_days"] > 0
                ),
                **data,
            )
        )
    return restaurants


def demo_offers(now: datetime, restaurants: Optional[list[Restaurant]] = None) -> list[Offer]:
    """Demo offers as domain models with ids in list order; later ids are newer."""
    restaurants = restaurants or demo_restaurants(now)
    offers = []
    for index, data in enumerate(OFFERS):
        restaurant = restaurants[data["restaurant"]]
        created = now - timedelta(days=1) + timedelta(minutes=index)
        offers.append(
            Offer(
                id=index + 1,
                restaurant_id=restaurant.id,
                title=data["title"],
                description=data["description"],
                original_price=Decimal(data["original_price"]),
                discounted_price=Decimal(data["discounted_price"]),
                discount=data["discount"],
                terms=data["terms"],
                expires_at=now + timedelta(days=data["expires_in_days"]),
                is_active=data.get("is_active", True),
                restaurant=restaurant.summary(),
                created_at=created,
                updated_at=created,
            )
        )
    return offers


async def seed_database(db: Database) -> bool:
    """Insert the demo owner, restaurants and offers.

    Returns False without writing when restaurants already exist.
    """
    now = datetime.utcnow()

    async with db.session() as session:
        existing = (await session.execute(select(func.count(RestaurantTable.id)))).scalar_one()
        if existing:
            logger.info("seed_skipped", existing_restaurants=existing)
            return False

        owner = UserTable(
            telegram_user_id=DEMO_OWNER_TELEGRAM_ID,
            telegram_username="mealdeal_demo",
            name="Demo Restaurant Owner",
            email="demo@mealdeal.com",
        )
        session.add(owner)
        await session.flush()

        rows = [RestaurantTable(owner_id=owner.id, **data) for data in RESTAURANTS]
        session.add_all(rows)
        await session.flush()

        for data in OFFERS:
            session.add(
                OfferTable(
                    restaurant_id=rows[data["restaurant"]].id,
                    title=data["title"],
                    description=data["description"],
                    original_price=Decimal(data["original_price"]),
                    discounted_price=Decimal(data["discounted_price"]),
                    discount=data["discount"],
                    terms=data["terms"],
                    expires_at=now + timedelta(days=data["expires_in_days"]),
                    is_active=data.get("is_active", True),
                )
            )
        await session.flush()

    logger.info("seed_completed", restaurants=len(RESTAURANTS), offers=len(OFFERS))
    return True


async def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    db = Database(settings)
    await db.connect()
    try:
        await seed_database(db)
    finally:
        await db.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
