"""Command routing configuration for bot handlers.

Registers all command and message handlers with the bot application.
"""

from telegram.ext import Application

from mealdeal.bot.callback_map import register_callback_handlers
from mealdeal.handlers.deals.claim_handler import get_claim_handlers
from mealdeal.handlers.discovery.deals_handler import get_deals_handler
from mealdeal.handlers.discovery.location_handler import get_location_handlers
from mealdeal.handlers.discovery.restaurants_handler import get_restaurants_handlers
from mealdeal.handlers.management.listing_handler import get_listing_handlers
from mealdeal.handlers.newsletter.newsletter_handler import get_newsletter_handlers
from mealdeal.handlers.reservations.reservation_handler import get_reservation_handlers
from mealdeal.handlers.system.start_handler import get_system_handlers
from mealdeal.logging import get_logger

logger = get_logger(__name__)


def register_handlers(app: Application) -> None:
    """
    Register all command and message handlers with the application.

    Args:
        app: Telegram bot Application instance
    """
    app.add_handler(get_deals_handler())
    for handler in get_restaurants_handlers():
        app.add_handler(handler)
    for handler in get_location_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="discovery")

    for handler in get_claim_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="deal_claims")

    for handler in get_reservation_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="reservations")

    for handler in get_listing_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="listing_management")

    for handler in get_newsletter_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="newsletter")

    register_callback_handlers(app)

    # System handlers last so the plain-text fallback doesn't shadow anything
    for handler in get_system_handlers():
        app.add_handler(handler)
    logger.info("handler_registered", handler="system")
