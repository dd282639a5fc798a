"""HTTP email client for a Resend-compatible API."""

import html
from datetime import datetime
from typing import Optional
from urllib.parse import quote

import httpx

from mealdeal.logging import get_logger

logger = get_logger(__name__)


def unsubscribe_url(app_url: str, email: str) -> str:
    return f"{app_url.rstrip('/')}/api/newsletter/unsubscribe?email={quote(email, safe='')}"


def render_newsletter_html(content: str, unsubscribe_link: str, year: Optional[int] = None) -> str:
    """Default HTML body: one paragraph per line plus an unsubscribe footer."""
    year = year or datetime.utcnow().year
    paragraphs = "".join(
        f'<p style="margin: 10px 0;">{html.escape(line)}</p>' for line in content.split("\n")
    )
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">'
        f'<div style="margin: 20px 0;">{paragraphs}</div>'
        '<hr style="margin: 30px 0; border: none; border-top: 1px solid #eee;">'
        '<div style="font-size: 12px; color: #666; text-align: center;">'
        "<p>You're receiving this because you subscribed to MealDeal newsletter.</p>"
        f'<p><a href="{html.escape(unsubscribe_link)}" style="color: #666; text-decoration: underline;">'
        "Unsubscribe from these emails</a></p>"
        f"<p>&copy; {year} MealDeal. All rights reserved.</p>"
        "</div></div>"
    )


class EmailClient:
    """Sends single emails through the provider's /emails endpoint.

    Create one instance at startup and share it; the underlying
    httpx.AsyncClient is opened lazily and reused.
    """

    def __init__(self, api_url: str, api_key: str, sender: str, timeout: float = 10.0):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def send(self, to: str, subject: str, html_body: str, text_body: str) -> bool:
        """Send one email. Returns False when the provider rejects it or is unreachable."""
        client = await self._get_client()
        payload = {
            "from": self.sender,
            "to": to,
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }

        try:
            response = await client.post("/emails", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "email_send_rejected",
                status_code=e.response.status_code,
                subject=subject,
            )
            return False
        except httpx.RequestError as e:
            logger.warning("email_send_failed", error=str(e), subject=subject)
            return False

        return True
