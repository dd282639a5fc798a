"""Structured audit logging for marketplace actions.

Every audit entry is emitted as a single ``audit_event`` log line so that
the log pipeline can route them separately from operational logs.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from mealdeal.logging import get_logger

logger = get_logger(__name__)


class AuditEventType(str, Enum):
    """Types of auditable events."""

    RESTAURANT_CREATED = "restaurant_created"
    RESTAURANT_UPDATED = "restaurant_updated"
    OFFER_CREATED = "offer_created"
    DEAL_CLAIMED = "deal_claimed"
    RESERVATION_CREATED = "reservation_created"
    RESERVATION_STATUS_CHANGED = "reservation_status_changed"
    NEWSLETTER_SENT = "newsletter_sent"
    PERMISSION_DENIED = "permission_denied"


class AuditLogger:
    """Centralized audit logging service."""

    @staticmethod
    def log_event(
        event_type: AuditEventType,
        actor_id: int,
        resource_type: str,
        resource_id: int | str,
        action: str,
        success: bool = True,
        metadata: Optional[dict[str, Any]] = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Log an auditable event with structured context.

        Args:
            event_type: Type of audit event
            actor_id: User ID performing the action (Telegram ID for admins)
            resource_type: Type of resource (restaurant, offer, claim, ...)
            resource_id: ID of the affected resource
            action: Human-readable action description
            success: Whether the action succeeded
            metadata: Additional context
            error: Error message if action failed
        """
        audit_entry = {
            "event_type": event_type.value,
            "actor_id": actor_id,
            "resource_type": resource_type,
            "resource_id": str(resource_id),
            "action": action,
            "success": success,
            "timestamp": datetime.utcnow().isoformat(),
            "metadata": metadata or {},
        }
        if error:
            audit_entry["error"] = error

        logger.info("audit_event", **audit_entry)

    @staticmethod
    def log_restaurant_saved(
        actor_id: int, restaurant_id: int, name: str, created: bool
    ) -> None:
        """Log restaurant creation or update."""
        AuditLogger.log_event(
            event_type=(
                AuditEventType.RESTAURANT_CREATED
                if created
                else AuditEventType.RESTAURANT_UPDATED
            ),
            actor_id=actor_id,
            resource_type="restaurant",
            resource_id=restaurant_id,
            action=f"{'Created' if created else 'Updated'} restaurant: {name}",
            metadata={"name": name},
        )

    @staticmethod
    def log_offer_created(
        actor_id: int, offer_id: int, restaurant_id: int, title: str, discount: int
    ) -> None:
        """Log offer creation."""
        AuditLogger.log_event(
            event_type=AuditEventType.OFFER_CREATED,
            actor_id=actor_id,
            resource_type="offer",
            resource_id=offer_id,
            action=f"Created offer: {title}",
            metadata={"restaurant_id": restaurant_id, "discount": discount},
        )

    @staticmethod
    def log_deal_claimed(
        actor_id: int, claim_id: int, offer_id: int, redemption_code: str
    ) -> None:
        """Log a deal claim."""
        AuditLogger.log_event(
            event_type=AuditEventType.DEAL_CLAIMED,
            actor_id=actor_id,
            resource_type="claimed_deal",
            resource_id=claim_id,
            action="Claimed deal",
            metadata={"offer_id": offer_id, "redemption_code": redemption_code},
        )

    @staticmethod
    def log_reservation(
        actor_id: int,
        reservation_id: int,
        restaurant_id: int,
        status: str,
        created: bool,
    ) -> None:
        """Log reservation creation or status change."""
        AuditLogger.log_event(
            event_type=(
                AuditEventType.RESERVATION_CREATED
                if created
                else AuditEventType.RESERVATION_STATUS_CHANGED
            ),
            actor_id=actor_id,
            resource_type="reservation",
            resource_id=reservation_id,
            action=f"Reservation {status.lower()}",
            metadata={"restaurant_id": restaurant_id, "status": status},
        )

    @staticmethod
    def log_newsletter_sent(
        actor_id: int, newsletter_id: int, sent_count: int, total: int
    ) -> None:
        """Log a newsletter broadcast."""
        AuditLogger.log_event(
            event_type=AuditEventType.NEWSLETTER_SENT,
            actor_id=actor_id,
            resource_type="newsletter",
            resource_id=newsletter_id,
            action=f"Sent newsletter to {sent_count}/{total} subscribers",
            success=sent_count > 0,
            metadata={"sent_count": sent_count, "total_subscribers": total},
        )

    @staticmethod
    def log_permission_denied(
        actor_id: int, resource_type: str, resource_id: int | str, action: str
    ) -> None:
        """Log a refused action."""
        AuditLogger.log_event(
            event_type=AuditEventType.PERMISSION_DENIED,
            actor_id=actor_id,
            resource_type=resource_type,
            resource_id=resource_id,
            action=action,
            success=False,
        )
