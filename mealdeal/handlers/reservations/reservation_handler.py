"""Table reservations: /reserve, /myreservations, /cancelreservation."""

from datetime import datetime
from typing import Optional

from pydantic import ValidationError
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
from mealdeal.models.reservation import Reservation, ReservationInput, ReservationStatus
from mealdeal.services.reservation_flow import ReservationService, parse_status

logger = get_logger(__name__)

RESERVE_USAGE = "/reserve <restaurant id> <YYYY-MM-DD> <HH:MM> <party size> [requests] [phone=...]"


def parse_reservation_args(
    text: str, email: Optional[str] = None
) -> tuple[Optional[ReservationInput], str]:
    """
    Parse /reserve arguments into a ReservationInput.

    Returns: (input, error message)
    """
    words, fields = parse_command_args(text)
    if len(words) < 4:
        return None, ERROR_TEMPLATES["usage"](RESERVE_USAGE)

    restaurant_raw, date_raw, time_raw, party_raw = words[:4]
    requests = " ".join(words[4:]) or fields.get("requests")

    try:
        restaurant_id = int(restaurant_raw.lstrip("#"))
        party_size = int(party_raw)
    except ValueError:
        return None, ERROR_TEMPLATES["invalid_input"](
            "restaurant id or party size", "Both must be numbers"
        )

    try:
        when = datetime.strptime(f"{date_raw} {time_raw}", "%Y-%m-%d %H:%M")
    except ValueError:
        return None, ERROR_TEMPLATES["invalid_input"](
            "date or time", "Use YYYY-MM-DD and HH:MM"
        )

    try:
        data = ReservationInput(
            restaurant_id=restaurant_id,
            date=when,
            time=time_raw,
            party_size=party_size,
            special_requests=requests,
            phone_number=fields.get("phone"),
            email=fields.get("email", email),
        )
    except ValidationError:
        return None, ERROR_TEMPLATES["invalid_input"]("reservation", "Check the restaurant id")

    return data, ""


def format_reservation(reservation: Reservation) -> str:
    name = reservation.restaurant_name or f"Restaurant #{reservation.restaurant_id}"
    text = (
        f"📅 #{reservation.id} · {name}\n"
        f"   {reservation.date.strftime('%a %b %d')} at {reservation.time}"
        f" · party of {reservation.party_size} · {reservation.status.value.lower()}"
    )
    if reservation.special_requests:
        text += f"\n   📝 {reservation.special_requests}"
    return text


async def reserve_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reserve."""
    reservation_service: ReservationService = context.bot_data["reservation_service"]

    try:
        user = await current_user(update, context)
    except Exception as e:
        logger.error("reserve_user_lookup_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    data, error = parse_reservation_args(command_text(update), email=user.email)
    if data is None:
        await update.message.reply_text(error)
        return

    try:
        success, message, reservation = await reservation_service.create_reservation(user.id, data)
    except Exception as e:
        logger.error(
            "reservation_failed",
            restaurant_id=data.restaurant_id,
            error=str(e),
            exc_info=True,
        )
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not success:
        await update.message.reply_text(
            format_error_message("❌", message, f"Usage: {RESERVE_USAGE}")
        )
        return

    await update.message.reply_text(
        f"✅ {message}!\n\n{format_reservation(reservation)}\n\n"
        "The restaurant will confirm your booking. "
        f"Cancel with /cancelreservation {reservation.id}"
    )


async def myreservations_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myreservations [status]."""
    reservation_service: ReservationService = context.bot_data["reservation_service"]

    status: Optional[ReservationStatus] = None
    if context.args:
        status = parse_status(context.args[0])
        if status is None:
            await update.message.reply_text(
                ERROR_TEMPLATES["invalid_input"](
                    "status", "Use pending, confirmed, cancelled or completed"
                )
            )
            return

    try:
        user = await current_user(update, context)
        reservations = await reservation_service.list_reservations(user.id, status=status)
    except Exception as e:
        logger.error("list_reservations_failed", error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not reservations:
        await update.message.reply_text(
            f"📅 No reservations found.\n\nBook a table with {RESERVE_USAGE}"
        )
        return

    text = "📅 Your reservations\n\n" + "\n\n".join(
        format_reservation(reservation) for reservation in reservations
    )
    await update.message.reply_text(text)


async def cancel_reservation_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /cancelreservation <id>."""
    reservation_service: ReservationService = context.bot_data["reservation_service"]

    if not context.args:
        await update.message.reply_text(ERROR_TEMPLATES["usage"]("/cancelreservation <id>"))
        return

    try:
        reservation_id = int(context.args[0].lstrip("#"))
    except ValueError:
        await update.message.reply_text(
            ERROR_TEMPLATES["invalid_input"]("reservation id", "Reservation id must be a number")
        )
        return

    try:
        user = await current_user(update, context)
        success, message, _ = await reservation_service.update_status(
            user.id, reservation_id, ReservationStatus.CANCELLED.value
        )
    except Exception as e:
        logger.error("cancel_reservation_failed", reservation_id=reservation_id, error=str(e), exc_info=True)
        await update.message.reply_text(ERROR_TEMPLATES["unexpected"]())
        return

    if not success:
        await update.message.reply_text(ERROR_TEMPLATES["reservation_not_found"]())
        return

    await update.message.reply_text(f"🗑️ Reservation #{reservation_id} cancelled.")


def get_reservation_handlers() -> list:
    """Get handlers for table reservations."""
    return [
        CommandHandler("reserve", reserve_command),
        CommandHandler("myreservations", myreservations_command),
        CommandHandler("cancelreservation", cancel_reservation_command),
    ]
