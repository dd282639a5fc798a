"""Owner commands: /addrestaurant, /editrestaurant, /myrestaurants, /addoffer."""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from mealdeal.handlers import (
    ERROR_TEMPLATES,
    command_text,
    current_user,
    format_error_message,
    parse_command_args,
)
from mealdeal.logging import get_logger
from mealdeal.services.listing_management import (
    OfferService,
    RestaurantService,
    build_offer_input,
    build_restaurant_input,
)

logger = get_logger(__name__)

ADD_RESTAURANT_USAGE = (
    '/addrestaurant name="Bella Vista" cuisine=Italian location="123 Main St, Downtown" '
    "[latitude=.. longitude=.. phone=.. hours=.. description=.. image=..]"
)
EDIT_RESTAURANT_USAGE = "/editrestaurant <id> field=value ..."
ADD_OFFER_USAGE = (
    "/addoffer restaurant_id=1 title=\"Pasta Night\" original_price=30 "
    "discounted_price=15 discount=50 expires_at=2030-12-31T23:00 [description=.. terms=..]"
)


async def addrestaurant_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addrestaurant key=value ..."""
    restaurant_service: RestaurantService = context.bot_data["restaurant_service"]

    _, fields = parse_command_args(command_text(update))
    if not fields:
        await update.message.reply_text(ERROR_TEMPLATES["usage"](ADD_RESTAURANT_USAGE))
        return

    data, error = build_restaurant_input(fields)
    if data is None:
        await update.message.reply_text(
            format_error_message("❌", f"Invalid restaurant: {error}", f"Usage: {ADD_RESTAURANT_USAGE}")
        )
        return

    try:
        user = await current_user(update, context)
        success, message, restaurant = await restaurant_service.create_restaurant(user.id, data)
    except Exception as e:
        logger.error("create_restaurant_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not success:
        await update.message.reply_text(format_error_message("❌", message, "Please try again."))
        return

    await update.message.reply_text(
        f"🏪 {message}!\n\n"
        f"{restaurant.name} (#{restaurant.id}) · {restaurant.cuisine}\n"
        f"📍 {restaurant.location}\n\n"
        f"Post a deal with /addoffer restaurant_id={restaurant.id} ..."
    )


async def editrestaurant_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /editrestaurant <id> key=value ...; unspecified fields keep their values."""
    restaurant_service: RestaurantService = context.bot_data["restaurant_service"]

    words, fields = parse_command_args(command_text(update))
    if not words or not fields:
        await update.message.reply_text(ERROR_TEMPLATES["usage"](EDIT_RESTAURANT_USAGE))
        return

    try:
        restaurant_id = int(words[0].lstrip("#"))
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("restaurant id", "Restaurant id must be a number")
        )
        return

    try:
        user = await current_user(update, context)
        owned = await restaurant_service.list_owned(user.id)
    except Exception as e:
        logger.error("edit_restaurant_lookup_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    existing = next((r for r in owned if r.id == restaurant_id), None)
    if existing is None:
        await update.message.reply_text(ERROR_TEMPLATES["restaurant_not_found"]())
        return

    merged = existing.model_dump(
        include={
            "name", "cuisine", "location", "description", "latitude",
            "longitude", "phone", "hours", "image",
        }
    )
    merged = {key: value for key, value in merged.items() if value is not None}
    merged.update(fields)

    data, error = build_restaurant_input(merged)
    if data is None:
        await update.message.reply_text(
            format_error_message("❌", f"Invalid restaurant: {error}", f"Usage: {EDIT_RESTAURANT_USAGE}")
        )
        return

    try:
        success, message, restaurant = await restaurant_service.update_restaurant(
            user.id, restaurant_id, data
        )
    except Exception as e:
        logger.error("update_restaurant_failed", restaurant_id=restaurant_id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not success:
        await update.message.reply_text(format_error_message("❌", message, "Check /myrestaurants"))
        return

    await update.message.reply_text(f"✏️ {message}: {restaurant.name} (#{restaurant.id})")


async def myrestaurants_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myrestaurants."""
    restaurant_service: RestaurantService = context.bot_data["restaurant_service"]

    try:
        user = await current_user(update, context)
        restaurants = await restaurant_service.list_owned(user.id)
    except Exception as e:
        logger.error("list_owned_restaurants_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not restaurants:
        await update.message.reply_text(
            f"🏪 You don't have any restaurants yet.\n\nAdd one with {ADD_RESTAURANT_USAGE}"
        )
        return

    lines = [
        f"🏪 {r.name} (#{r.id}) · {r.cuisine} · {r.live_offer_count} live deal(s)\n   📍 {r.location}"
        for r in restaurants
    ]
    await update.message.reply_text("🏪 Your restaurants\n\n" + "\n\n".join(lines))


async def addoffer_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /addoffer key=value ..."""
    offer_service: OfferService = context.bot_data["offer_service"]

    _, fields = parse_command_args(command_text(update))
    if not fields:
        await update.message.reply_text(ERROR_TEMPLATES["usage"](ADD_OFFER_USAGE))
        return

    data, error = build_offer_input(fields)
    if data is None:
        await update.message.reply_text(
            format_error_message("❌", f"Invalid offer: {error}", f"Usage: {ADD_OFFER_USAGE}")
        )
        return

    try:
        user = await current_user(update, context)
        success, message, offer = await offer_service.create_offer(user.id, data)
    except Exception as e:
        logger.error("create_offer_failed", restaurant_id=data.restaurant_id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not success:
        await update.message.reply_text(format_error_message("❌", message, "Check /myrestaurants"))
        return

    await update.message.reply_text(
        f"🎉 {message}!\n\n"
        f"🍽️ {offer.title} (#{offer.id}) at {offer.restaurant.name}\n"
        f"💰 ${offer.discounted_price} (was ${offer.original_price}, -{offer.discount}%)\n"
        f"⏰ Expires {offer.expires_at.strftime('%b %d, %H:%M')}"
    )


def get_listing_handlers() -> list:
    """Get handlers for restaurant and offer management."""
    return [
        CommandHandler("addrestaurant", addrestaurant_command),
        CommandHandler("editrestaurant", editrestaurant_command),
        CommandHandler("myrestaurants", myrestaurants_command),
        CommandHandler("addoffer", addoffer_command),
    ]
