"""Deal discovery: /deals search with filters, geo scope and paging."""

import secrets

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CommandHandler, ContextTypes

from mealdeal.handlers import (
    ERROR_TEMPLATES,
    command_text,
    format_error_message,
    parse_command_args,
)
from mealdeal.logging import get_logger
from mealdeal.models.search import OfferResult, ResultPage
from mealdeal.services.geo_distance import format_distance
from mealdeal.services.offer_search import OfferSearchService

logger = get_logger(__name__)

DEALS_SEARCHES_KEY = "deals_searches"
NEXT_PAGE_PREFIX = "deals_next:"

# Older results messages stop paging once their search falls out
MAX_REMEMBERED_SEARCHES = 20


def build_deal_params(text: str) -> dict[str, str]:
    """
    Turn /deals arguments into search parameters.

    Free words become the text search; key=value pairs pass through
    (cuisine, location, discount, sortBy, lat, lng, radius, activeOnly,
    restaurantId, limit). Only live deals are listed unless activeOnly
    is given explicitly.
    """
    words, fields = parse_command_args(text)
    params = dict(fields)
    if words and "search" not in params:
        params["search"] = " ".join(words)
    params.setdefault("activeOnly", "true")
    params.pop("cursor", None)
    return params


def remember_search(context: ContextTypes.DEFAULT_TYPE, params: dict[str, str]) -> str:
    """Store search params under a new token and return the token."""
    searches: dict[str, dict[str, str]] = context.user_data.setdefault(DEALS_SEARCHES_KEY, {})
    token = secrets.token_hex(4)
    searches[token] = params
    while len(searches) > MAX_REMEMBERED_SEARCHES:
        searches.pop(next(iter(searches)))
    return token


def parse_next_page_data(data: str) -> tuple[str, str]:
    """Split next-page callback data into (search token, cursor)."""
    token, _, cursor = data[len(NEXT_PAGE_PREFIX):].partition(":")
    return token, cursor


def format_offer_card(result: OfferResult) -> str:
    """One offer as a short text card."""
    offer = result.offer
    lines = [
        f"🍽️ {offer.title} (#{offer.id})",
        f"🏪 {offer.restaurant.name} · {offer.restaurant.cuisine}",
        f"💰 ${offer.discounted_price} (was ${offer.original_price}, -{offer.discount}%)",
        f"📍 {offer.restaurant.location}",
    ]
    if result.distance_km is not None:
        lines[-1] += f" · {format_distance(result.distance_km)} away"
    lines.append(f"⏰ Expires {offer.expires_at.strftime('%b %d, %H:%M')}")
    return "\n".join(lines)


def format_deals_page(page: ResultPage) -> str:
    if not page.offers:
        return (
            "😔 No deals match your search.\n"
            "Try different filters, or share your location for nearby deals."
        )

    total = page.pagination.total_count
    header = f"🛍️ Deals ({page.count} of {total})\n\n"
    cards = "\n\n".join(format_offer_card(result) for result in page.offers)
    footer = "\n\nClaim one with /claim <offer id>"
    return header + cards + footer


def _next_page_markup(page: ResultPage, token: str) -> InlineKeyboardMarkup | None:
    if not page.pagination.has_next_page or page.pagination.next_cursor is None:
        return None
    return InlineKeyboardMarkup(
        [[
            InlineKeyboardButton(
                "➡️ More deals",
                callback_data=f"{NEXT_PAGE_PREFIX}{token}:{page.pagination.next_cursor}",
            )
        ]]
    )


async def deals_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /deals [text] [key=value ...]."""
    search_service: OfferSearchService = context.bot_data["search_service"]
    telegram_user = update.effective_user

    params = build_deal_params(command_text(update))
    token = remember_search(context, params)

    try:
        criteria = await search_service.criteria_for_user(params, telegram_user.id)
        page = await search_service.search_offers(criteria)
    except Exception as e:
        logger.error("deals_search_failed", user_id=telegram_user.id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    await update.message.reply_text(
        format_deals_page(page), reply_markup=_next_page_markup(page, token)
    )


async def handle_deals_next_page(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Load the next page of the search the pressed button belongs to."""
    query = update.callback_query
    await query.answer()

    search_service: OfferSearchService = context.bot_data["search_service"]
    token, cursor = parse_next_page_data(query.data)

    stored = context.user_data.get(DEALS_SEARCHES_KEY, {}).get(token)
    if stored is None:
        logger.info("deals_search_forgotten", token=token)
        await query.edit_message_reply_markup(reply_markup=None)
        await query.message.reply_text(
            format_error_message("⌛", "This search has expired.", "Run /deals again to search.")
        )
        return

    params = dict(stored)
    params["cursor"] = cursor

    try:
        criteria = await search_service.criteria_for_user(params, update.effective_user.id)
        page = await search_service.search_offers(criteria)
    except Exception as e:
        logger.error("deals_page_failed", cursor=cursor, error=str(e), exc_info=True)
        await query.edit_message_text(ERROR_TEMPLATES["unexpected"]())
        return

    await query.edit_message_text(
        format_deals_page(page), reply_markup=_next_page_markup(page, token)
    )


def get_deals_handler() -> CommandHandler:
    """Get /deals command handler."""
    return CommandHandler("deals", deals_command)
