"""Handlers package - Telegram bot feature plugins."""

import re
import shlex

from telegram import Update
from telegram.ext import ContextTypes

from mealdeal.models.user import User, UserInput
from mealdeal.storage.database import Database
from mealdeal.storage.postgres_user_repo import PostgresUserRepository

_FIELD_PATTERN = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)=(.*)$", re.DOTALL)


def format_error_message(emoji: str, problem: str, action: str) -> str:
    """
    Format error messages following the pattern: [emoji] [problem] [action].

    Args:
        emoji: Visual indicator (e.g., "❌", "⚠️", "🔒")
        problem: Clear description of what went wrong
        action: Suggested next step for the user

    Returns:
        Formatted error message string

    Example:
        >>> format_error_message("❌", "Offer expired", "Browse other deals with /deals")
        "❌ Offer expired\n\nBrowse other deals with /deals"
    """
    return f"{emoji} {problem}\n\n{action}"


# Common error templates
ERROR_TEMPLATES = {
    "permission_denied": lambda: format_error_message(
        "🔒",
        "You don't have permission to perform this action.",
        "Make sure you're using the correct account."
    ),
    "offer_not_found": lambda: format_error_message(
        "❌",
        "Offer not found or has expired.",
        "Browse current deals with /deals"
    ),
    "restaurant_not_found": lambda: format_error_message(
        "❌",
        "Restaurant not found.",
        "Find restaurants with /restaurants"
    ),
    "reservation_not_found": lambda: format_error_message(
        "❌",
        "Reservation not found.",
        "Check your reservations with /myreservations"
    ),
    "invalid_input": lambda field, requirement: format_error_message(
        "❌",
        f"Invalid {field}.",
        f"{requirement}. Please try again."
    ),
    "usage": lambda usage: format_error_message(
        "ℹ️",
        "Missing arguments.",
        f"Usage: {usage}"
    ),
    "unexpected": lambda: format_error_message(
        "⚠️",
        "Something went wrong on our side.",
        "Please try again in a moment."
    ),
}


def command_text(update: Update) -> str:
    """Message text after the leading /command, or empty string."""
    text = (update.message.text or "") if update.message else ""
    if not text.startswith("/"):
        return text.strip()
    _, _, rest = text.partition(" ")
    return rest.strip()


def parse_command_args(text: str) -> tuple[list[str], dict[str, str]]:
    """
    Split command text into free words and key=value fields.

    Values may be quoted: name="Bella Vista" location='Downtown'.
    Unbalanced quotes fall back to plain whitespace splitting.

    Returns: (words, fields)
    """
    try:
        tokens = shlex.split(text)
    except ValueError:
        tokens = text.split()

    words: list[str] = []
    fields: dict[str, str] = {}
    for token in tokens:
        match = _FIELD_PATTERN.match(token)
        if match:
            fields[match.group(1)] = match.group(2)
        else:
            words.append(token)
    return words, fields


async def current_user(update: Update, context: ContextTypes.DEFAULT_TYPE) -> User:
    """Return the stored user for the Telegram account, registering it on first contact."""
    db: Database = context.bot_data["db"]
    telegram_user = update.effective_user

    async with db.session() as session:
        return await PostgresUserRepository(session).get_or_create(
            UserInput(
                telegram_user_id=telegram_user.id,
                telegram_username=telegram_user.username,
                name=telegram_user.full_name or telegram_user.username or str(telegram_user.id),
            )
        )
