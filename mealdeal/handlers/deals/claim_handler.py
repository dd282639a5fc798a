"""Deal claiming: /claim and /mydeals."""

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from mealdeal.handlers import ERROR_TEMPLATES, current_user, format_error_message
from mealdeal.logging import get_logger
from mealdeal.models.claimed_deal import ClaimedDeal
from mealdeal.services.deal_claim import DealClaimService

logger = get_logger(__name__)

STATUS_EMOJI = {
    "CLAIMED": "🎟️",
    "REDEEMED": "✅",
    "EXPIRED": "⌛",
}


def format_claim(claim: ClaimedDeal) -> str:
    emoji = STATUS_EMOJI.get(claim.status.value, "🎟️")
    line = f"{emoji} Code {claim.redemption_code} · {claim.status.value.lower()}"
    if claim.offer is not None:
        line += (
            f"\n   {claim.offer.title} at {claim.offer.restaurant.name}"
            f" (-{claim.offer.discount}%)"
        )
    line += f"\n   Claimed {claim.claimed_at.strftime('%b %d, %H:%M')}"
    return line


async def claim_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /claim <offer_id>."""
    claim_service: DealClaimService = context.bot_data["claim_service"]

    if not context.args:
        await update.message.reply_text(ERROR_TEMPLATES["usage"]("/claim <offer id>"))
        return

    try:
        offer_id = int(context.args[0].lstrip("#"))
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("offer id", "Offer id must be a number")
        )
        return

    try:
        user = await current_user(update, context)
        success, message, claim = await claim_service.claim_deal(user.id, offer_id)
    except Exception as e:
        logger.error("claim_failed", offer_id=offer_id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not success:
        await update.message.reply_text(
            format_error_message("❌", message, "Browse current deals with /deals")
        )
        return

    offer = claim.offer
    await update.message.reply_text(
        f"🎉 {message}!\n\n"
        f"🍽️ {offer.title}\n"
        f"🏪 {offer.restaurant.name}, {offer.restaurant.location}\n"
        f"💰 ${offer.discounted_price} (was ${offer.original_price})\n\n"
        f"🔑 Redemption code: {claim.redemption_code}\n"
        "Show this code at the restaurant."
    )


async def mydeals_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /mydeals."""
    claim_service: DealClaimService = context.bot_data["claim_service"]

    try:
        user = await current_user(update, context)
        claims = await claim_service.list_claims(user.id)
    except Exception as e:
        logger.error("list_claims_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not claims:
        await update.message.reply_text(
            "🎟️ You haven't claimed any deals yet.\n\nFind one with /deals"
        )
        return

    text = "🎟️ Your deals\n\n" + "\n\n".join(format_claim(claim) for claim in claims)
    await update.message.reply_text(text)


def get_claim_handlers() -> list:
    """Get handlers for deal claims."""
    return [
        CommandHandler("claim", claim_command),
        CommandHandler("mydeals", mydeals_command),
    ]
