"""Unit tests for discovery, claim, reservation, listing and newsletter handlers."""

from datetime import datetime
from unittest.mock import AsyncMock, Mock, patch

import pytest

from mealdeal.handlers.deals.claim_handler import claim_command, format_claim, mydeals_command
from mealdeal.handlers.discovery.deals_handler import (
    DEALS_SEARCHES_KEY,
    MAX_REMEMBERED_SEARCHES,
    NEXT_PAGE_PREFIX,
    build_deal_params,
    deals_command,
    format_deals_page,
    format_offer_card,
    handle_deals_next_page,
    parse_next_page_data,
    remember_search,
)
from mealdeal.handlers.discovery.location_handler import forget_location_command, location_message
from mealdeal.handlers.discovery.restaurants_handler import (
    format_restaurant_detail,
    format_restaurant_page,
    restaurant_command,
)
from mealdeal.handlers.management.listing_handler import addoffer_command, editrestaurant_command
from mealdeal.handlers.newsletter.newsletter_handler import (
    format_stats,
    newsletter_command,
    split_newsletter_text,
)
from mealdeal.handlers.reservations.reservation_handler import parse_reservation_args
from mealdeal.models.claimed_deal import ClaimedDeal
from mealdeal.models.newsletter import Newsletter, NewsletterStats
from mealdeal.models.search import (
    OfferResult,
    Pagination,
    RestaurantDetail,
    RestaurantPage,
    RestaurantResult,
    ResultPage,
)
from mealdeal.models.user import User
from mealdeal.security.permissions import PermissionChecker

USER = User(id=7, telegram_user_id=12345, name="Test User")


class TestBuildDealParams:
    """Tests for /deals argument handling."""

    def test_free_words_become_search(self):
        params = build_deal_params("sushi bar cuisine=Japanese")

        assert params == {"search": "sushi bar", "cuisine": "Japanese", "activeOnly": "true"}

    def test_explicit_active_only_kept(self):
        assert build_deal_params("activeOnly=false")["activeOnly"] == "false"

    def test_cursor_dropped(self):
        assert "cursor" not in build_deal_params("cursor=24")

    def test_explicit_search_wins(self):
        assert build_deal_params("pizza search=pasta")["search"] == "pasta"


class TestFormatting:
    """Tests for message formatting."""

    def test_offer_card_with_distance(self, offers):
        card = format_offer_card(OfferResult(offer=offers[0], distance_km=0.4))

        assert "3-Course Italian Dinner for Two (#1)" in card
        assert "Bella Vista · Italian" in card
        assert "$60.00 (was $120.00, -50%)" in card
        assert "400m away" in card

    def test_offer_card_without_distance(self, offers):
        assert "away" not in format_offer_card(OfferResult(offer=offers[0]))

    def test_empty_deals_page(self):
        assert "No deals match" in format_deals_page(ResultPage())

    def test_deals_page_header(self, offers):
        page = ResultPage(
            offers=[OfferResult(offer=offer) for offer in offers[:2]],
            pagination=Pagination(has_next_page=True, next_cursor="2", total_count=22),
        )

        text = format_deals_page(page)

        assert text.startswith("🛍️ Deals (2 of 22)")
        assert "/claim" in text

    def test_restaurant_page_limits_listing(self, restaurants):
        page = RestaurantPage(
            restaurants=[RestaurantResult(restaurant=r) for r in restaurants * 2]
        )

        text = format_restaurant_page(page)

        assert "Restaurants (10 of 16)" in text

    def test_format_claim(self, offers):
        claim = ClaimedDeal(
            id=1,
            user_id=7,
            offer_id=1,
            redemption_code="AB12CD34",
            claimed_at=datetime(2026, 1, 15, 12, 30),
            offer=offers[0],
        )

        text = format_claim(claim)

        assert "Code AB12CD34 · claimed" in text
        assert "at Bella Vista (-50%)" in text
        assert "Claimed Jan 15, 12:30" in text

    def test_format_stats(self):
        stats = NewsletterStats(
            total_subscribers=10,
            active_subscribers=8,
            total_newsletters=2,
            recent_newsletters=[
                Newsletter(
                    id=2,
                    subject="Weekend deals",
                    content="...",
                    created_by=1,
                    sent_at=datetime(2026, 1, 10),
                    sent_count=8,
                ),
                Newsletter(id=1, subject="Draft", content="...", created_by=1),
            ],
        )

        text = format_stats(stats)

        assert "8 active / 10 total" in text
        assert "Weekend deals (sent to 8 on Jan 10)" in text
        assert "Draft (not sent)" in text


class TestParseReservationArgs:
    """Tests for /reserve argument parsing."""

    def test_full(self):
        data, error = parse_reservation_args(
            "#3 2026-02-14 19:30 2 window seat please phone=555-1234", email="me@example.com"
        )

        assert error == ""
        assert data.restaurant_id == 3
        assert data.date == datetime(2026, 2, 14, 19, 30)
        assert data.time == "19:30"
        assert data.party_size == 2
        assert data.special_requests == "window seat please"
        assert data.phone_number == "555-1234"
        assert data.email == "me@example.com"

    def test_too_few_words(self):
        data, error = parse_reservation_args("3 2026-02-14")

        assert data is None
        assert "Usage: /reserve" in error

    def test_bad_numbers(self):
        data, error = parse_reservation_args("abc 2026-02-14 19:30 two")

        assert data is None
        assert "restaurant id or party size" in error

    def test_bad_date(self):
        data, error = parse_reservation_args("3 14/02/2026 19:30 2")

        assert data is None
        assert "date or time" in error


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Weekend deals | Half price pasta", ("Weekend deals", "Half price pasta")),
        ("Subject|line one\nline two", ("Subject", "line one\nline two")),
        ("no separator", ("", "")),
        ("Subject | a | b", ("Subject", "a | b")),
    ],
)
def test_split_newsletter_text(text, expected):
    assert split_newsletter_text(text) == expected


@pytest.fixture
def search_service():
    service = Mock()
    service.criteria_for_user = AsyncMock(return_value=Mock())
    service.search_offers = AsyncMock(return_value=ResultPage())
    return service


class TestDealsCommand:
    """Tests for /deals and its paging callback."""

    @staticmethod
    def next_page_update(data):
        update = Mock()
        update.effective_user.id = 12345
        update.callback_query.data = data
        update.callback_query.answer = AsyncMock()
        update.callback_query.edit_message_text = AsyncMock()
        update.callback_query.edit_message_reply_markup = AsyncMock()
        update.callback_query.message.reply_text = AsyncMock()
        return update

    @pytest.mark.asyncio
    async def test_stores_params_and_replies(
        self, mock_telegram_update, mock_telegram_context, search_service
    ):
        mock_telegram_update.message.text = "/deals pizza discount=high"
        mock_telegram_context.bot_data["search_service"] = search_service

        await deals_command(mock_telegram_update, mock_telegram_context)

        searches = mock_telegram_context.user_data[DEALS_SEARCHES_KEY]
        (params,) = searches.values()
        assert params == {"search": "pizza", "discount": "high", "activeOnly": "true"}
        search_service.criteria_for_user.assert_awaited_once_with(params, 12345)
        mock_telegram_update.message.reply_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_next_page_button(
        self, mock_telegram_update, mock_telegram_context, search_service, offers
    ):
        mock_telegram_update.message.text = "/deals"
        mock_telegram_context.bot_data["search_service"] = search_service
        search_service.search_offers.return_value = ResultPage(
            offers=[OfferResult(offer=offers[0])],
            pagination=Pagination(has_next_page=True, next_cursor="12", total_count=20),
        )

        await deals_command(mock_telegram_update, mock_telegram_context)

        (token,) = mock_telegram_context.user_data[DEALS_SEARCHES_KEY]
        markup = mock_telegram_update.message.reply_text.await_args.kwargs["reply_markup"]
        data = markup.inline_keyboard[0][0].callback_data
        assert data == f"{NEXT_PAGE_PREFIX}{token}:12"
        assert len(data.encode()) <= 64
        assert parse_next_page_data(data) == (token, "12")

    @pytest.mark.asyncio
    async def test_search_failure(
        self, mock_telegram_update, mock_telegram_context, search_service
    ):
        mock_telegram_update.message.text = "/deals"
        mock_telegram_context.bot_data["search_service"] = search_service
        search_service.search_offers.side_effect = RuntimeError("db down")

        await deals_command(mock_telegram_update, mock_telegram_context)

        assert "Something went wrong" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_next_page_uses_its_own_search(self, mock_telegram_context, search_service):
        mock_telegram_context.bot_data["search_service"] = search_service
        older = remember_search(mock_telegram_context, {"search": "pizza", "activeOnly": "true"})
        remember_search(mock_telegram_context, {"search": "sushi", "activeOnly": "true"})
        update = self.next_page_update(f"{NEXT_PAGE_PREFIX}{older}:12")

        await handle_deals_next_page(update, mock_telegram_context)

        params, user_id = search_service.criteria_for_user.await_args.args
        assert params == {"search": "pizza", "activeOnly": "true", "cursor": "12"}
        assert user_id == 12345
        # Stored params are not mutated
        assert "cursor" not in mock_telegram_context.user_data[DEALS_SEARCHES_KEY][older]
        update.callback_query.edit_message_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_next_page_forgotten_search(self, mock_telegram_context, search_service):
        mock_telegram_context.bot_data["search_service"] = search_service
        update = self.next_page_update(f"{NEXT_PAGE_PREFIX}deadbeef:12")

        await handle_deals_next_page(update, mock_telegram_context)

        search_service.search_offers.assert_not_awaited()
        update.callback_query.edit_message_reply_markup.assert_awaited_once_with(reply_markup=None)
        assert "/deals" in update.callback_query.message.reply_text.await_args.args[0]

    def test_remembered_searches_bounded(self, mock_telegram_context):
        tokens = [
            remember_search(mock_telegram_context, {"search": str(i)})
            for i in range(MAX_REMEMBERED_SEARCHES + 5)
        ]

        searches = mock_telegram_context.user_data[DEALS_SEARCHES_KEY]
        assert len(searches) == MAX_REMEMBERED_SEARCHES
        assert tokens[0] not in searches
        assert searches[tokens[-1]] == {"search": str(MAX_REMEMBERED_SEARCHES + 4)}


class TestRestaurantCommand:
    """Tests for /restaurant <id>."""

    def test_format_detail(self, restaurants, offers):
        restaurant = restaurants[0].model_copy(
            update={"phone": "+1 555 0100", "hours": "11:00-22:00", "review_count": 120}
        )
        own_offers = [offer for offer in offers if offer.restaurant_id == restaurant.id]

        text = format_restaurant_detail(RestaurantDetail(restaurant=restaurant, offers=own_offers))

        assert text.startswith(f"🏪 {restaurant.name} (#{restaurant.id})")
        assert "(120 reviews)" in text
        assert "📞 +1 555 0100" in text
        assert "🕒 11:00-22:00" in text
        assert f"Live deals ({len(own_offers)})" in text
        for offer in own_offers:
            assert f"#{offer.id} {offer.title}" in text
        assert f"/reserve {restaurant.id}" in text

    def test_format_detail_without_offers(self, restaurants):
        text = format_restaurant_detail(RestaurantDetail(restaurant=restaurants[0]))

        assert "No live deals right now." in text
        assert "/claim" not in text

    @pytest.mark.asyncio
    async def test_shows_detail(self, mock_telegram_update, mock_telegram_context, restaurants):
        service = Mock()
        service.restaurant_detail = AsyncMock(
            return_value=RestaurantDetail(restaurant=restaurants[0])
        )
        mock_telegram_context.bot_data["search_service"] = service
        mock_telegram_update.message.text = "/restaurant 1"

        await restaurant_command(mock_telegram_update, mock_telegram_context)

        service.restaurant_detail.assert_awaited_once_with(1)
        assert restaurants[0].name in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("/restaurant", "Usage: /restaurant <restaurant id>"),
            ("/restaurant abc", "Invalid restaurant id."),
            ("/restaurant 999", "Restaurant not found."),
        ],
    )
    async def test_rejects_bad_requests(
        self, mock_telegram_update, mock_telegram_context, text, expected
    ):
        service = Mock()
        service.restaurant_detail = AsyncMock(return_value=None)
        mock_telegram_context.bot_data["search_service"] = service
        mock_telegram_update.message.text = text

        await restaurant_command(mock_telegram_update, mock_telegram_context)

        assert expected in mock_telegram_update.message.reply_text.await_args.args[0]


class TestClaimCommand:
    """Tests for /claim and /mydeals."""

    @pytest.fixture
    def claim_service(self, mock_telegram_context):
        service = Mock()
        service.claim_deal = AsyncMock()
        service.list_claims = AsyncMock(return_value=[])
        mock_telegram_context.bot_data["claim_service"] = service
        return service

    @pytest.mark.asyncio
    async def test_claim_success(self, mock_telegram_update, mock_telegram_context, claim_service, offers):
        mock_telegram_context.args = ["#1"]
        claim_service.claim_deal.return_value = (
            True,
            "Deal claimed successfully",
            ClaimedDeal(id=1, user_id=7, offer_id=1, redemption_code="AB12CD34", offer=offers[0]),
        )

        with patch("mealdeal.handlers.deals.claim_handler.current_user", new=AsyncMock(return_value=USER)):
            await claim_command(mock_telegram_update, mock_telegram_context)

        claim_service.claim_deal.assert_awaited_once_with(7, 1)
        text = mock_telegram_update.message.reply_text.await_args.args[0]
        assert "Redemption code: AB12CD34" in text

    @pytest.mark.asyncio
    async def test_claim_rejected(self, mock_telegram_update, mock_telegram_context, claim_service):
        mock_telegram_context.args = ["1"]
        claim_service.claim_deal.return_value = (False, "You have already claimed this deal", None)

        with patch("mealdeal.handlers.deals.claim_handler.current_user", new=AsyncMock(return_value=USER)):
            await claim_command(mock_telegram_update, mock_telegram_context)

        assert "already claimed" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_claim_needs_numeric_id(self, mock_telegram_update, mock_telegram_context, claim_service):
        mock_telegram_context.args = ["pizza"]

        await claim_command(mock_telegram_update, mock_telegram_context)

        claim_service.claim_deal.assert_not_awaited()
        assert "Invalid offer id" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_claim_usage(self, mock_telegram_update, mock_telegram_context, claim_service):
        mock_telegram_context.args = []

        await claim_command(mock_telegram_update, mock_telegram_context)

        assert "Usage: /claim" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_mydeals_empty(self, mock_telegram_update, mock_telegram_context, claim_service):
        with patch("mealdeal.handlers.deals.claim_handler.current_user", new=AsyncMock(return_value=USER)):
            await mydeals_command(mock_telegram_update, mock_telegram_context)

        claim_service.list_claims.assert_awaited_once_with(7)
        assert "haven't claimed" in mock_telegram_update.message.reply_text.await_args.args[0]


class TestLocationHandlers:
    """Tests for shared-location capture."""

    @pytest.fixture
    def location_cache(self, mock_telegram_context):
        cache = Mock()
        cache.ttl_seconds = 3600
        cache.set = AsyncMock()
        cache.clear = AsyncMock()
        mock_telegram_context.bot_data["location_cache"] = cache
        return cache

    @pytest.mark.asyncio
    async def test_location_saved(self, mock_telegram_update, mock_telegram_context, location_cache):
        mock_telegram_update.message.location = Mock(latitude=40.7128, longitude=-74.006)

        await location_message(mock_telegram_update, mock_telegram_context)

        user_id, coordinate = location_cache.set.await_args.args
        assert user_id == 12345
        assert coordinate.latitude == 40.7128
        assert "next 60 minutes" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_location_cache_down(self, mock_telegram_update, mock_telegram_context, location_cache):
        mock_telegram_update.message.location = Mock(latitude=40.7128, longitude=-74.006)
        location_cache.set.side_effect = ConnectionError("redis down")

        await location_message(mock_telegram_update, mock_telegram_context)

        assert "Could not save" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_forget_location(self, mock_telegram_update, mock_telegram_context, location_cache):
        await forget_location_command(mock_telegram_update, mock_telegram_context)

        location_cache.clear.assert_awaited_once_with(12345)


class TestListingHandlers:
    """Tests for owner commands."""

    @pytest.mark.asyncio
    async def test_editrestaurant_merges_fields(
        self, mock_telegram_update, mock_telegram_context, restaurants
    ):
        service = Mock()
        service.list_owned = AsyncMock(return_value=[restaurants[0]])
        service.update_restaurant = AsyncMock(
            return_value=(True, "Restaurant updated successfully", restaurants[0])
        )
        mock_telegram_context.bot_data["restaurant_service"] = service
        mock_telegram_update.message.text = '/editrestaurant 1 hours="Daily 9-5"'

        with patch(
            "mealdeal.handlers.management.listing_handler.current_user",
            new=AsyncMock(return_value=User(id=1, telegram_user_id=12345, name="Owner")),
        ):
            await editrestaurant_command(mock_telegram_update, mock_telegram_context)

        owner_id, restaurant_id, data = service.update_restaurant.await_args.args
        assert (owner_id, restaurant_id) == (1, 1)
        assert data.hours == "Daily 9-5"
        assert data.name == "Bella Vista"
        assert data.latitude == 40.7128

    @pytest.mark.asyncio
    async def test_editrestaurant_not_owned(
        self, mock_telegram_update, mock_telegram_context
    ):
        service = Mock()
        service.list_owned = AsyncMock(return_value=[])
        service.update_restaurant = AsyncMock()
        mock_telegram_context.bot_data["restaurant_service"] = service
        mock_telegram_update.message.text = "/editrestaurant 1 name=Mine"

        with patch(
            "mealdeal.handlers.management.listing_handler.current_user",
            new=AsyncMock(return_value=USER),
        ):
            await editrestaurant_command(mock_telegram_update, mock_telegram_context)

        service.update_restaurant.assert_not_awaited()
        assert "Restaurant not found" in mock_telegram_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_addoffer_invalid_input(self, mock_telegram_update, mock_telegram_context):
        service = Mock()
        service.create_offer = AsyncMock()
        mock_telegram_context.bot_data["offer_service"] = service
        mock_telegram_update.message.text = "/addoffer restaurant_id=1 title=Soup"

        await addoffer_command(mock_telegram_update, mock_telegram_context)

        service.create_offer.assert_not_awaited()
        assert "Invalid offer" in mock_telegram_update.message.reply_text.await_args.args[0]


class TestNewsletterCommand:
    """Tests for the admin broadcast command."""

    @pytest.mark.asyncio
    async def test_non_admin_blocked(self, mock_telegram_update, mock_telegram_context):
        service = Mock()
        service.broadcast = AsyncMock()
        mock_telegram_context.bot_data["newsletter_service"] = service
        mock_telegram_context.bot_data["permission_checker"] = PermissionChecker(admin_user_ids=[1])
        mock_telegram_update.message.text = "/newsletter Hi | Body"

        await newsletter_command(mock_telegram_update, mock_telegram_context)

        service.broadcast.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_broadcast(self, mock_telegram_update, mock_telegram_context):
        service = Mock()
        service.broadcast = AsyncMock(
            return_value=(True, "Newsletter sent successfully to 2 out of 2 subscribers", 2)
        )
        mock_telegram_context.bot_data["newsletter_service"] = service
        mock_telegram_context.bot_data["permission_checker"] = PermissionChecker(admin_user_ids=[12345])
        mock_telegram_update.message.text = "/newsletter Weekend deals | Half price pasta"

        await newsletter_command(mock_telegram_update, mock_telegram_context)

        service.broadcast.assert_awaited_once_with(12345, "Weekend deals", "Half price pasta")
        assert "2 out of 2" in mock_telegram_update.message.reply_text.await_args.args[0]
