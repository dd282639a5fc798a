"""Newsletter commands: /subscribe, /unsubscribe, /newsletter, /newsletterstats."""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from mealdeal.handlers import ERROR_TEMPLATES, command_text, format_error_message
from mealdeal.logging import get_logger
from mealdeal.models.newsletter import NewsletterStats
from mealdeal.security.permissions import PermissionChecker
from mealdeal.services.newsletter import NewsletterService

logger = get_logger(__name__)

NEWSLETTER_USAGE = "/newsletter <subject> | <content>"


def split_newsletter_text(text: str) -> tuple[str, str]:
    """Split "<subject> | <content>"; content may span several lines."""
    subject, sep, content = text.partition("|")
    if not sep:
        return "", ""
    return subject.strip(), content.strip()


def format_stats(stats: NewsletterStats) -> str:
    text = (
        "📊 Newsletter stats\n\n"
        f"👥 Subscribers: {stats.active_subscribers} active / {stats.total_subscribers} total\n"
        f"📨 Newsletters: {stats.total_newsletters}"
    )
    if stats.recent_newsletters:
        text += "\n\nRecent:"
        for newsletter in stats.recent_newsletters:
            sent = (
                f"sent to {newsletter.sent_count} on {newsletter.sent_at.strftime('%b %d')}"
                if newsletter.sent_at
                else "not sent"
            )
            text += f"\n• {newsletter.subject} ({sent})"
    return text


async def subscribe_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /subscribe <email>."""
    newsletter_service: NewsletterService = context.bot_data["newsletter_service"]

    if not context.args:
        await update.message.reply_text(ERROR_TEMPLATES["usage"]("/subscribe <email>"))
        return

    try:
        success, message = await newsletter_service.subscribe(context.args[0])
    except Exception as e:
        logger.error("newsletter_subscribe_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if success:
        await update.message.reply_text(f"📬 {message}")
    else:
        await update.message.reply_text(format_error_message("❌", message, "Please check the address."))


async def unsubscribe_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /unsubscribe <email>."""
    newsletter_service: NewsletterService = context.bot_data["newsletter_service"]

    if not context.args:
        await update.message.reply_text(ERROR_TEMPLATES["usage"]("/unsubscribe <email>"))
        return

    try:
        success, message = await newsletter_service.unsubscribe(context.args[0])
    except Exception as e:
        logger.error("newsletter_unsubscribe_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if success:
        await update.message.reply_text(f"👋 {message}")
    else:
        await update.message.reply_text(format_error_message("❌", message, "Please check the address."))


async def newsletter_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /newsletter <subject> | <content> (admins only)."""
    newsletter_service: NewsletterService = context.bot_data["newsletter_service"]
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]
    telegram_user = update.effective_user

    if not permission_checker.can_send_newsletter(telegram_user.id):
        await update.message.reply_text(ERROR_TEMPLATES["permission_denied"]())
        return

    subject, content = split_newsletter_text(command_text(update))
    if not subject or not content:
        await update.message.reply_text(ERROR_TEMPLATES["usage"](NEWSLETTER_USAGE))
        return

    await update.message.reply_text("📨 Sending newsletter...")

    try:
        success, message, _ = await newsletter_service.broadcast(telegram_user.id, subject, content)
    except Exception as e:
        logger.error("newsletter_broadcast_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if success:
        await update.message.reply_text(f"✅ {message}")
    else:
        await update.message.reply_text(format_error_message("❌", message, "Nothing was sent."))


async def newsletterstats_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /newsletterstats (admins only)."""
    newsletter_service: NewsletterService = context.bot_data["newsletter_service"]
    permission_checker: PermissionChecker = context.bot_data["permission_checker"]

    if not permission_checker.is_admin(update.effective_user.id):
        await update.message.reply_text(ERROR_TEMPLATES["permission_denied"]())
        return

    try:
        stats = await newsletter_service.stats()
    except Exception as e:
        logger.error("newsletter_stats_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    await update.message.reply_text(format_stats(stats))


def get_newsletter_handlers() -> list:
    """Get handlers for newsletter commands."""
    return [
        CommandHandler("subscribe", subscribe_command),
        CommandHandler("unsubscribe", unsubscribe_command),
        CommandHandler("newsletter", newsletter_command),
        CommandHandler("newsletterstats", newsletterstats_command),
    ]
