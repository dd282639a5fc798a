"""Restaurant discovery: /restaurants search and /restaurant details."""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from mealdeal.handlers import ERROR_TEMPLATES, command_text, parse_command_args
from mealdeal.logging import get_logger
from mealdeal.models.search import RestaurantDetail, RestaurantPage, RestaurantResult
from mealdeal.services.geo_distance import format_distance
from mealdeal.services.offer_search import OfferSearchService

logger = get_logger(__name__)

MAX_LISTED_RESTAURANTS = 10


def format_restaurant_line(result: RestaurantResult) -> str:
    restaurant = result.restaurant
    line = (
        f"🏪 {restaurant.name} (#{restaurant.id}) · {restaurant.cuisine} · "
        f"⭐ {restaurant.rating:.1f}\n"
        f"   📍 {restaurant.location}"
    )
    if result.distance_km is not None:
        line += f" · {format_distance(result.distance_km)} away"
    line += f"\n   🔥 {restaurant.live_offer_count} live deal(s)"
    return line


def format_restaurant_page(page: RestaurantPage) -> str:
    if not page.restaurants:
        return "😔 No restaurants match your search."

    shown = page.restaurants[:MAX_LISTED_RESTAURANTS]
    text = f"🍴 Restaurants ({len(shown)} of {page.count})\n\n"
    text += "\n\n".join(format_restaurant_line(result) for result in shown)
    if page.filters.cuisines:
        text += "\n\nCuisines: " + ", ".join(page.filters.cuisines)
    text += "\n\nDetails and deals: /restaurant <id>"
    return text


async def restaurants_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /restaurants [text] [key=value ...]."""
    search_service: OfferSearchService = context.bot_data["search_service"]
    telegram_user = update.effective_user

    words, fields = parse_command_args(command_text(update))
    params = dict(fields)
    if words and "search" not in params:
        params["search"] = " ".join(words)

    try:
        criteria = await search_service.criteria_for_user(params, telegram_user.id)
        page = await search_service.search_restaurants(criteria)
    except Exception as e:
        logger.error("restaurant_search_failed", user_id=telegram_user.id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    await update.message.reply_text(format_restaurant_page(page))


def format_restaurant_detail(detail: RestaurantDetail) -> str:
    """Full restaurant card with its live deals."""
    restaurant = detail.restaurant
    lines = [
        f"🏪 {restaurant.name} (#{restaurant.id})",
        f"🍴 {restaurant.cuisine} · ⭐ {restaurant.rating:.1f} ({restaurant.review_count} reviews)",
        f"📍 {restaurant.location}",
    ]
    if restaurant.phone:
        lines.append(f"📞 {restaurant.phone}")
    if restaurant.hours:
        lines.append(f"🕒 {restaurant.hours}")
    if restaurant.description:
        lines.append(f"\n{restaurant.description}")

    if detail.offers:
        lines.append(f"\n🔥 Live deals ({len(detail.offers)}):")
        for offer in detail.offers:
            lines.append(
                f"• #{offer.id} {offer.title}: ${offer.discounted_price} "
                f"(was ${offer.original_price}, -{offer.discount}%)"
            )
        lines.append("\nClaim one with /claim <offer id>")
    else:
        lines.append("\nNo live deals right now.")

    lines.append(f"Book a table with /reserve {restaurant.id} <YYYY-MM-DD> <HH:MM> <party>")
    return "\n".join(lines)


async def restaurant_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /restaurant <id>."""
    search_service: OfferSearchService = context.bot_data["search_service"]

    words, _ = parse_command_args(command_text(update))
    if not words:
        await update.message.reply_text(ERROR_TEMPLATES["usage"]("/restaurant <restaurant id>"))
        return

    try:
        restaurant_id = int(words[0])
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("restaurant id", "Restaurant id must be a number")
        )
        return

    try:
        detail = await search_service.restaurant_detail(restaurant_id)
    except Exception as e:
        logger.error("restaurant_detail_failed", restaurant_id=restaurant_id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if detail is None:
        await update.message.reply_text(ERROR_TEMPLATES["restaurant_not_found"]())
        return

    await update.message.reply_text(format_restaurant_detail(detail))


def get_restaurants_handlers() -> list[CommandHandler]:
    """Get /restaurants and /restaurant command handlers."""
    return [
        CommandHandler("restaurants", restaurants_command),
        CommandHandler("restaurant", restaurant_command),
    ]
