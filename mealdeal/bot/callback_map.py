"""Callback query routing for inline buttons.

Maps callback patterns to handlers for inline keyboard interactions.
"""

from telegram.ext import Application, CallbackQueryHandler

from mealdeal.handlers.discovery.deals_handler import NEXT_PAGE_PREFIX, handle_deals_next_page
from mealdeal.logging import get_logger

logger = get_logger(__name__)


def register_callback_handlers(app: Application) -> None:
    """
    Register callback query handlers for inline buttons.

    Args:
        app: Telegram bot Application instance
    """
    app.add_handler(
        CallbackQueryHandler(handle_deals_next_page, pattern=rf"^{NEXT_PAGE_PREFIX}")
    )
    logger.info("callback_handler_registered", pattern=NEXT_PAGE_PREFIX)
