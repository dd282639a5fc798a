"""Telegram bot startup and main application entry point."""

import asyncio
import threading

from telegram import BotCommand
from telegram.ext import Application

from mealdeal.bot.command_map import register_handlers
from mealdeal.config import load_settings
from mealdeal.handlers.system.health import start_health_server
from mealdeal.logging import get_logger, setup_logging
from mealdeal.security.permissions import PermissionChecker
from mealdeal.services.deal_claim import DealClaimService
from mealdeal.services.email_client import EmailClient
from mealdeal.services.listing_management import OfferService, RestaurantService
from mealdeal.services.newsletter import NewsletterService
from mealdeal.services.offer_search import OfferSearchService
from mealdeal.services.reservation_flow import ReservationService
from mealdeal.storage.database import Database
from mealdeal.storage.location_cache import LocationCache

BOT_COMMANDS = [
    BotCommand("start", "Start or restart the bot"),
    BotCommand("help", "Show help and commands"),
    BotCommand("deals", "Search live deals"),
    BotCommand("restaurants", "Search restaurants"),
    BotCommand("mydeals", "Your claimed deals"),
    BotCommand("myreservations", "Your table reservations"),
    BotCommand("myrestaurants", "Restaurants you manage"),
    BotCommand("subscribe", "Subscribe to the newsletter"),
]


async def setup_bot_menu(application: Application) -> None:
    """Configure the bot menu commands."""
    await application.bot.set_my_commands(BOT_COMMANDS)

    logger = get_logger(__name__)
    logger.info("bot_menu_configured", command_count=len(BOT_COMMANDS))


async def main() -> None:
    """Initialize and start the Telegram bot."""
    settings = load_settings()
    setup_logging(settings.log_level)
    logger = get_logger(__name__)

    logger.info("Starting MealDeal bot", environment=settings.environment)

    db = Database(settings)
    await db.connect()

    location_cache = LocationCache(settings.redis_url, ttl_seconds=settings.location_cache_ttl_seconds)
    await location_cache.connect()

    email_client = EmailClient(
        api_url=settings.email_api_url,
        api_key=settings.email_api_key,
        sender=settings.email_from,
    )

    permission_checker = PermissionChecker(admin_user_ids=settings.admin_user_ids)

    search_service = OfferSearchService(
        db,
        location_cache=location_cache,
        default_radius_km=settings.default_radius_km,
        page_size=settings.search_page_size,
    )
    newsletter_service = NewsletterService(
        db,
        email_client,
        permission_checker,
        app_url=settings.app_url,
        batch_size=settings.newsletter_batch_size,
        batch_delay_seconds=settings.newsletter_batch_delay_seconds,
    )

    application = Application.builder().token(settings.bot_token).build()

    # Store services in bot_data for handler access
    application.bot_data["db"] = db
    application.bot_data["settings"] = settings
    application.bot_data["location_cache"] = location_cache
    application.bot_data["permission_checker"] = permission_checker
    application.bot_data["search_service"] = search_service
    application.bot_data["restaurant_service"] = RestaurantService(db, permission_checker)
    application.bot_data["offer_service"] = OfferService(db)
    application.bot_data["claim_service"] = DealClaimService(db)
    application.bot_data["reservation_service"] = ReservationService(db)
    application.bot_data["newsletter_service"] = newsletter_service

    register_handlers(application)

    health_server = start_health_server(
        host=settings.health_host,
        port=settings.health_port,
        db=db,
        location_cache=location_cache,
        newsletter_service=newsletter_service,
        loop=asyncio.get_running_loop(),
    )
    health_thread = threading.Thread(target=health_server.serve_forever, daemon=True)
    health_thread.start()

    await application.initialize()
    await setup_bot_menu(application)
    await application.start()
    await application.updater.start_polling(allowed_updates=["message", "callback_query"])

    logger.info("Bot initialization complete, polling for updates")

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info("Shutting down bot")
    finally:
        health_server.shutdown()
        await application.updater.stop()
        await application.stop()
        await application.shutdown()
        await email_client.close()
        await location_cache.disconnect()
        await db.disconnect()


def cli() -> None:
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    cli()
