"""Permission checks for bot commands."""

from mealdeal.models.restaurant import Restaurant


class PermissionChecker:
    """Check user permissions for actions."""

    def __init__(self, admin_user_ids: list[int] | None = None):
        """Initialize permission checker."""
        self.admin_user_ids = admin_user_ids or []

    def is_admin(self, telegram_user_id: int) -> bool:
        """Check if user is admin by telegram ID."""
        return telegram_user_id in self.admin_user_ids

    def owns_restaurant(self, user_id: int, restaurant: Restaurant) -> bool:
        """Check if user owns the restaurant."""
        return restaurant.owner_id == user_id

    def can_send_newsletter(self, telegram_user_id: int) -> bool:
        """Check if user can broadcast newsletters (admin only)."""
        return self.is_admin(telegram_user_id)
