"""Shared-location capture for nearby searches."""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes, MessageHandler, filters

from mealdeal.handlers import format_error_message
from mealdeal.logging import get_logger
from mealdeal.models.geo import Coordinate
from mealdeal.storage.location_cache import LocationCache

logger = get_logger(__name__)


async def location_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Remember a shared location so /deals and /restaurants can search nearby."""
    location_cache: LocationCache = context.bot_data["location_cache"]
    telegram_user = update.effective_user
    shared = update.message.location

    try:
        coordinate = Coordinate(latitude=shared.latitude, longitude=shared.longitude)
        await location_cache.set(telegram_user.id, coordinate)
    except Exception as e:
        logger.error("location_store_failed", user_id=telegram_user.id, error=str(e), exc_info=True)
        await update.message.reply_text(
            format_error_message(
                "⚠️",
                "Could not save your location.",
                "Pass lat=... lng=... to /deals instead.",
            )
        )
        return

    minutes = location_cache.ttl_seconds // 60
    await update.message.reply_text(
        "📍 Location saved!\n\n"
        f"For the next {minutes} minutes /deals and /restaurants show places "
        "near you. Add radius=<km> to widen or narrow the search."
    )


async def forget_location_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /forgetlocation."""
    location_cache: LocationCache = context.bot_data["location_cache"]
    telegram_user = update.effective_user

    try:
        await location_cache.clear(telegram_user.id)
    except Exception as e:
        logger.error("location_clear_failed", user_id=telegram_user.id, error=str(e), exc_info=True)
        await update.message.reply_text(
            format_error_message("⚠️", "Could not clear your location.", "Please try again later.")
        )
        return

    await update.message.reply_text("🗑️ Location forgotten. Searches are no longer limited to nearby places.")


def get_location_handlers() -> list:
    """Get handlers for location sharing."""
    return [
        MessageHandler(filters.LOCATION, location_message),
        CommandHandler("forgetlocation", forget_location_command),
    ]
