"""Tests for shared helpers."""

import discord
import pytest

from helpers import (
    FALLBACK_COLOR,
    format_uptime,
    get_safe_color,
    has_role,
    is_staff,
    parse_leading_int,
    slugify_channel_name,
    truncate,
)


class TestSafeColor:
    def test_six_digit(self):
        assert get_safe_color("#3498db").value == 0x3498DB

    def test_three_digit(self):
        assert get_safe_color("#fff").value == 0xFFFFFF

    @pytest.mark.parametrize("bad", [None, "", "3498db", "#12345", "#zzzzzz", "blue"])
    def test_invalid_falls_back(self, bad):
        assert get_safe_color(bad).value == FALLBACK_COLOR


def test_parse_leading_int():
    assert parse_leading_int("15 apples") == 15
    assert parse_leading_int("x15") is None


def test_slugify_channel_name():
    assert slugify_channel_name("support-Cool Driver!!") == "support-cool-driver"
    assert slugify_channel_name("✨✨") == "ticket"
    assert len(slugify_channel_name("a" * 200)) <= 90


def test_truncate():
    assert truncate("short") == "short"
    assert truncate(None) == ""
    clipped = truncate("x" * 2000)
    assert len(clipped) == 1024
    assert clipped.endswith("…")


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0m"), (59, "0m"), (125, "2m"), (3 * 3600 + 60, "3h 1m"), (90000, "1d 1h 0m"), (-5, "0m")],
)
def test_format_uptime(seconds, expected):
    assert format_uptime(seconds) == expected


class TestStaff:
    def test_admin_is_staff(self, member_factory):
        assert is_staff(member_factory(admin=True), staff_role_id=None)

    def test_staff_role_is_staff(self, member_factory):
        assert is_staff(member_factory(roles=[42]), staff_role_id=42)

    def test_regular_member_is_not_staff(self, member_factory):
        assert not is_staff(member_factory(roles=[7]), staff_role_id=42)

    def test_non_member_is_not_staff(self):
        assert not is_staff(None, staff_role_id=42)

    def test_has_role(self, member_factory):
        member = member_factory(roles=[42])
        assert has_role(member, 42)
        assert not has_role(member, None)
        assert not has_role(member, 7)
