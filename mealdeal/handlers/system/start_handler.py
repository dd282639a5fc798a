"""Welcome, help and fallback handlers."""

from telegram import KeyboardButton, ReplyKeyboardMarkup, Update
from telegram.ext import CommandHandler, ContextTypes, MessageHandler, filters

from mealdeal.handlers import current_user
from mealdeal.logging import get_logger

logger = get_logger(__name__)

HELP_TEXT = (
    "🍽️ MealDeal commands\n\n"
    "Find deals\n"
    "/deals [text] [key=value ...] - search live deals\n"
    "   cuisine=Italian location=Downtown discount=high|medium|low\n"
    "   sortBy=created|discount|price|rating|expiry|distance\n"
    "   lat=.. lng=.. radius=<km> restaurantId=<id> limit=<n>\n"
    "/restaurants [text] [key=value ...] - search restaurants\n"
    "/restaurant <id> - details and live deals for one restaurant\n"
    "📍 Share your location to search nearby; /forgetlocation to stop\n\n"
    "Your deals and bookings\n"
    "/claim <offer id> - claim a deal and get a redemption code\n"
    "/mydeals - your claimed deals\n"
    "/reserve <restaurant id> <YYYY-MM-DD> <HH:MM> <party size> [requests]\n"
    "/myreservations [status] - your reservations\n"
    "/cancelreservation <id>\n\n"
    "Restaurant owners\n"
    "/addrestaurant name=.. cuisine=.. location=.. [latitude=.. longitude=..]\n"
    "/editrestaurant <id> field=value ...\n"
    "/myrestaurants\n"
    "/addoffer restaurant_id=.. title=.. original_price=.. discounted_price=.. "
    "discount=.. expires_at=..\n\n"
    "Newsletter\n"
    "/subscribe <email> · /unsubscribe <email>"
)


def _location_keyboard() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        [[KeyboardButton("📍 Share location", request_location=True)]],
        resize_keyboard=True,
        one_time_keyboard=True,
    )


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Register the user on first contact and show a welcome message."""
    telegram_user = update.effective_user

    try:
        user = await current_user(update, context)
    except Exception as e:
        logger.error("start_registration_failed", user_id=telegram_user.id, error=str(e), exc_info=True)
        await update.message.reply_text("⚠️ Something went wrong. Please try /start again.")
        return

    logger.info("user_started", user_id=user.id, telegram_user_id=telegram_user.id)

    await update.message.reply_text(
        f"👋 Welcome to MealDeal, {user.name}!\n\n"
        "Discover discounted meals at restaurants near you.\n\n"
        "• /deals to browse live deals\n"
        "• Share your location to see what's nearby\n"
        "• /help for all commands",
        reply_markup=_location_keyboard(),
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help."""
    await update.message.reply_text(HELP_TEXT)


async def default_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Reply to plain text with a pointer to the commands."""
    await update.message.reply_text(
        "🤔 I didn't understand that.\n\nTry /deals to find deals or /help for all commands."
    )


def get_system_handlers() -> list:
    """Get /start, /help and the plain-text fallback."""
    return [
        CommandHandler("start", start_command),
        CommandHandler("help", help_command),
        MessageHandler(filters.TEXT & ~filters.COMMAND, default_message),
    ]
