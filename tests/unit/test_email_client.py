"""Unit tests for the email API client."""

import json

import httpx
import pytest

from mealdeal.services.email_client import EmailClient, render_newsletter_html, unsubscribe_url


def make_client(handler) -> EmailClient:
    client = EmailClient(api_url="https://api.mail.test", api_key="re_test", sender="MealDeal <news@mealdeal.test>")
    client._client = httpx.AsyncClient(
        base_url=client.api_url,
        headers={"Authorization": f"Bearer {client.api_key}"},
        transport=httpx.MockTransport(handler),
    )
    return client


def test_unsubscribe_url_encodes_email():
    url = unsubscribe_url("https://mealdeal.test/", "a+b@example.com")
    assert url == "https://mealdeal.test/api/newsletter/unsubscribe?email=a%2Bb%40example.com"


def test_render_newsletter_html_escapes_content():
    body = render_newsletter_html("Deals <today>\nSecond line", "https://x.test/u?email=a", year=2026)

    assert "Deals &lt;today&gt;" in body
    assert "Second line" in body
    assert "https://x.test/u?email=a" in body
    assert "&copy; 2026 MealDeal" in body


@pytest.mark.asyncio
async def test_send_posts_payload():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "msg_1"})

    client = make_client(handler)
    ok = await client.send("diner@example.com", "Weekly deals", "<p>hi</p>", "hi")
    await client.close()

    assert ok is True
    [request] = requests
    assert request.url.path == "/emails"
    assert request.headers["Authorization"] == "Bearer re_test"
    payload = json.loads(request.content)
    assert payload == {
        "from": "MealDeal <news@mealdeal.test>",
        "to": "diner@example.com",
        "subject": "Weekly deals",
        "html": "<p>hi</p>",
        "text": "hi",
    }


@pytest.mark.asyncio
async def test_send_rejected_returns_false():
    client = make_client(lambda request: httpx.Response(422, json={"message": "invalid"}))

    assert await client.send("bad", "s", "<p></p>", "") is False
    await client.close()


@pytest.mark.asyncio
async def test_send_unreachable_returns_false():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    assert await client.send("diner@example.com", "s", "<p></p>", "") is False
    await client.close()


@pytest.mark.asyncio
async def test_close_is_idempotent():
    client = EmailClient(api_url="https://api.mail.test", api_key="k", sender="s@test")

    await client.close()
    await client.close()

    assert client._client is None
