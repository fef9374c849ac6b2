"""Tests for welcome/about/help embeds and the AFK toggle."""

from unittest.mock import MagicMock

import pytest

from community import AFK_PREFIX, HELP_SECTIONS, about_embed, afk_nickname, help_embed, welcome_embed
from config import ABOUT


class TestAfk:
    def test_adds_tag(self):
        assert afk_nickname("Trucker") == ("[AFK] Trucker", True)

    def test_removes_tag(self):
        assert afk_nickname("[AFK] Trucker") == ("Trucker", False)

    def test_long_names_are_capped(self):
        nick, afk = afk_nickname("x" * 32)
        assert afk
        assert nick.startswith(AFK_PREFIX)
        assert len(nick) == 32


class TestHelp:
    def test_all_sections(self):
        embed = help_embed("!")
        assert len(embed.fields) == len(HELP_SECTIONS)
        assert "`!ping`" in embed.fields[0].value

    def test_single_section_uses_prefix(self):
        embed = help_embed("?", "games")
        assert [f.name for f in embed.fields] == [HELP_SECTIONS["games"][0]]
        assert "`?slots`" in embed.fields[0].value

    def test_lines_use_plain_separators(self):
        for field in help_embed("!").fields:
            assert "—" not in field.value

    @pytest.mark.parametrize("section", [None, "nonsense"])
    def test_unknown_section_shows_everything(self, section):
        assert len(help_embed("!", section).fields) == len(HELP_SECTIONS)


def test_about_embed():
    embed = about_embed()
    assert embed.title == ABOUT["title"]
    assert len(embed.fields) == len(ABOUT["fields"])


def test_welcome_embed(member_factory):
    member = member_factory(7, "newdriver")
    member.display_avatar = MagicMock()
    member.display_avatar.replace.return_value.url = "https://cdn.example/a.png"

    embed = welcome_embed(member)

    assert member.mention in embed.description
    assert embed.fields[0].value == "newdriver"
    assert embed.thumbnail.url == "https://cdn.example/a.png"
