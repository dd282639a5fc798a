"""Unit tests for error message formatting and command parsing."""

from unittest.mock import Mock

import pytest

from mealdeal.handlers import (
    ERROR_TEMPLATES,
    command_text,
    format_error_message,
    parse_command_args,
)


def test_format_error_message_structure():
    """Test error message follows [emoji] [problem] [action] pattern."""
    error = format_error_message("❌", "Something went wrong", "Try again later")

    assert error == "❌ Something went wrong\n\nTry again later"


def test_error_template_permission_denied():
    error = ERROR_TEMPLATES["permission_denied"]()

    assert "🔒" in error
    assert "permission" in error.lower()


@pytest.mark.parametrize(
    "key,command",
    [
        ("offer_not_found", "/deals"),
        ("restaurant_not_found", "/restaurants"),
        ("reservation_not_found", "/myreservations"),
    ],
)
def test_not_found_templates_point_to_command(key, command):
    assert command in ERROR_TEMPLATES[key]()


def test_error_template_invalid_input():
    error = ERROR_TEMPLATES["invalid_input"]("offer id", "Offer id must be a number")

    assert "Invalid offer id." in error
    assert "Offer id must be a number. Please try again." in error


def test_error_template_usage():
    assert "Usage: /claim <offer id>" in ERROR_TEMPLATES["usage"]("/claim <offer id>")


class TestParseCommandArgs:
    """Tests for splitting command text."""

    def test_words_and_fields(self):
        words, fields = parse_command_args('pasta cuisine=Italian location="Main St" discount=high')

        assert words == ["pasta"]
        assert fields == {"cuisine": "Italian", "location": "Main St", "discount": "high"}

    def test_unbalanced_quotes_fall_back(self):
        words, fields = parse_command_args('name="Joe\'s BBQ cuisine=BBQ')

        assert fields["cuisine"] == "BBQ"
        assert fields["name"] == '"Joe\'s'
        assert words == ["BBQ"]

    def test_empty(self):
        assert parse_command_args("") == ([], {})

    def test_value_with_equals(self):
        _, fields = parse_command_args("terms=a=b")
        assert fields == {"terms": "a=b"}


@pytest.mark.parametrize(
    "text,expected",
    [
        ("/deals sushi radius=5", "sushi radius=5"),
        ("/deals", ""),
        ("/deals@MealDealBot  pizza ", "pizza"),
        ("plain text", "plain text"),
        (None, ""),
    ],
)
def test_command_text(text, expected):
    update = Mock()
    update.message.text = text

    assert command_text(update) == expected
