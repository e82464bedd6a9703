"""Tests for dispatcher module."""

import asyncio

import pytest

from lib import replies
from lib.config import BotSettings
from lib.discord_client import HistoryEntry
from lib.dispatcher import CommandDispatcher, IncomingMessage, strip_prefix
from lib.identity_color import derive_color, identity_key
from tests.platform_fakes import FakePlatform

CHANNEL = 500
ROLE = 42
GUILD = 7
USER = 111
PROFILE = "!steckbrief Max Mustermann\nAlter: 23\nHobby: Schach"


def make_settings(**overrides) -> BotSettings:
    values = dict(
        submission_channel_id=CHANNEL,
        submission_role_id=ROLE,
        minimum_length=0,
        message_fetch_limit=100,
    )
    values.update(overrides)
    return BotSettings(**values)


def make_message(content: str, author_id: int = USER, is_bot: bool = False, guild_id=GUILD):
    return IncomingMessage(
        message_id=1,
        guild_id=guild_id,
        author_id=author_id,
        author_name=f"user{author_id}",
        author_is_bot=is_bot,
        content=content,
    )


class TestStripPrefix:
    """Tests for strip_prefix function."""

    def test_with_prefix(self):
        assert strip_prefix("!ping", "!") == "ping"

    def test_without_prefix(self):
        assert strip_prefix("ping", "!") is None


class TestPing:
    """Tests for the ping command."""

    @pytest.mark.asyncio
    async def test_ping(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(make_message("!ping"))
        assert platform.replies == [replies.PONG]

    @pytest.mark.asyncio
    async def test_ping_needs_exact_match(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(make_message("!ping me"))
        assert platform.replies == []

    @pytest.mark.asyncio
    async def test_ignores_bots_and_plain_messages(self):
        platform = FakePlatform()
        dispatcher = CommandDispatcher(make_settings(), platform)
        await dispatcher.handle(make_message("!ping", is_bot=True))
        await dispatcher.handle(make_message("ping"))
        assert platform.replies == []

    @pytest.mark.asyncio
    async def test_reply_failure_is_swallowed(self):
        platform = FakePlatform()
        platform.fail.add("reply")
        await CommandDispatcher(make_settings(), platform).handle(make_message("!ping"))
        assert platform.replies == []


class TestProfileErrors:
    """Tests for rejected profiles."""

    @pytest.mark.asyncio
    async def test_too_short(self):
        platform = FakePlatform()
        dispatcher = CommandDispatcher(make_settings(minimum_length=200), platform)
        await dispatcher.handle(make_message(PROFILE))
        assert platform.replies == [replies.TOO_SHORT]
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_malformed_field(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(
            make_message("!steckbrief Max\nAlter 23")
        )
        assert len(platform.replies) == 1
        assert "`Alter 23`" in platform.replies[0]
        assert "Zeile 2" in platform.replies[0]
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_no_fields(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(make_message("!steckbrief Max"))
        assert platform.replies == [replies.NO_FIELDS]

    @pytest.mark.asyncio
    async def test_empty_name(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(make_message("!steckbrief   "))
        assert platform.replies == [replies.EMPTY_NAME]
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_value_too_long(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(
            make_message("!steckbrief Max\nHobby: " + "x" * 1025)
        )
        assert "`Hobby`" in platform.replies[0]
        assert "1024" in platform.replies[0]
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_missing_channel(self):
        platform = FakePlatform(channel_id=999)
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert platform.replies == [replies.CHANNEL_MISSING]
        assert platform.sent == []


class TestProfilePublishing:
    """Tests for creating and updating cards."""

    @pytest.mark.asyncio
    async def test_first_submission(self):
        platform = FakePlatform()
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))

        assert len(platform.sent) == 1
        channel_id, embed = platform.sent[0]
        assert channel_id == CHANNEL
        assert embed.title == "Steckbrief von Max Mustermann"
        assert embed.description == f"<@{USER}>"
        assert embed.color.value == derive_color(identity_key(USER))
        assert [(f.name, f.value) for f in embed.fields] == [("Alter", "23"), ("Hobby", "Schach")]
        assert platform.granted == [(GUILD, USER, ROLE)]
        assert platform.history_limits == []
        assert platform.replies == [replies.CREATED]

    @pytest.mark.asyncio
    async def test_resubmission_updates_card(self):
        platform = FakePlatform(
            roles={USER: {ROLE}},
            history=[
                HistoryEntry(message_id=10, description="<@222>"),
                HistoryEntry(message_id=11, description=f"<@{USER}>"),
            ],
        )
        await CommandDispatcher(make_settings(message_fetch_limit=50), platform).handle(
            make_message(PROFILE)
        )

        assert platform.sent == []
        assert platform.granted == []
        assert [(c, m) for c, m, _ in platform.updated] == [(CHANNEL, 11)]
        assert platform.history_limits == [50]
        assert platform.replies == [replies.UPDATED]

    @pytest.mark.asyncio
    async def test_role_without_card_publishes_new(self):
        platform = FakePlatform(roles={USER: {ROLE}}, history=[HistoryEntry(10, "<@222>")])
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert len(platform.sent) == 1
        assert platform.updated == []

    @pytest.mark.asyncio
    async def test_card_beyond_fetch_limit_is_not_found(self):
        platform = FakePlatform(
            roles={USER: {ROLE}},
            history=[HistoryEntry(10, "<@222>"), HistoryEntry(11, f"<@{USER}>")],
        )
        await CommandDispatcher(make_settings(message_fetch_limit=1), platform).handle(
            make_message(PROFILE)
        )
        assert len(platform.sent) == 1
        assert platform.updated == []

    @pytest.mark.asyncio
    async def test_member_lookup_failure_publishes_new(self):
        platform = FakePlatform(roles={USER: {ROLE}}, history=[HistoryEntry(11, f"<@{USER}>")])
        platform.fail.add("member")
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert len(platform.sent) == 1
        assert platform.updated == []

    @pytest.mark.asyncio
    async def test_update_failure(self):
        platform = FakePlatform(roles={USER: {ROLE}}, history=[HistoryEntry(11, f"<@{USER}>")])
        platform.fail.add("update")
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert platform.replies == [replies.UPDATE_FAILED]
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_history_failure_aborts(self):
        platform = FakePlatform(roles={USER: {ROLE}})
        platform.fail.add("history")
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert platform.replies == [replies.GENERIC_FAILURE]
        assert platform.sent == []

    @pytest.mark.asyncio
    async def test_avatar_failure_aborts(self):
        platform = FakePlatform()
        platform.fail.add("avatar")
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert platform.replies == [replies.GENERIC_FAILURE]
        assert platform.sent == []
        assert platform.granted == []

    @pytest.mark.asyncio
    async def test_outside_server_publishes_without_role(self):
        platform = FakePlatform(roles={USER: {ROLE}}, history=[HistoryEntry(11, f"<@{USER}>")])
        await CommandDispatcher(make_settings(), platform).handle(
            make_message(PROFILE, guild_id=None)
        )
        assert len(platform.sent) == 1
        assert platform.updated == []
        assert platform.granted == []
        assert platform.replies == [replies.ROLE_FAILED]

    @pytest.mark.asyncio
    async def test_send_failure_grants_no_role(self):
        platform = FakePlatform()
        platform.fail.add("send")
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert platform.replies == [replies.GENERIC_FAILURE]
        assert platform.granted == []

    @pytest.mark.asyncio
    async def test_role_failure_keeps_card(self):
        platform = FakePlatform()
        platform.fail.add("role")
        await CommandDispatcher(make_settings(), platform).handle(make_message(PROFILE))
        assert len(platform.sent) == 1
        assert platform.replies == [replies.ROLE_FAILED]

    @pytest.mark.asyncio
    async def test_custom_prefix_and_command(self):
        platform = FakePlatform()
        dispatcher = CommandDispatcher(
            make_settings(command_prefix="?", command_word="profil"), platform
        )
        await dispatcher.handle(make_message("?profil Max\nAlter: 23"))
        assert len(platform.sent) == 1


class TestSerializedSubmissions:
    """Tests for concurrent submissions by the same user."""

    @pytest.mark.asyncio
    async def test_unserialized_submissions_race(self):
        """Test both handlers miss each other's card without the lock."""
        platform = FakePlatform()
        dispatcher = CommandDispatcher(make_settings(serialize_submissions=False), platform)

        await asyncio.gather(
            dispatcher.handle(make_message(PROFILE)),
            dispatcher.handle(make_message(PROFILE)),
        )

        assert len(platform.sent) == 2
        assert platform.updated == []

    @pytest.mark.asyncio
    async def test_serialized_second_submission_updates(self):
        """Test the lock makes the second submission update the first card."""
        platform = FakePlatform()
        dispatcher = CommandDispatcher(make_settings(serialize_submissions=True), platform)

        await asyncio.gather(
            dispatcher.handle(make_message(PROFILE)),
            dispatcher.handle(make_message(PROFILE)),
        )

        assert len(platform.sent) == 1
        assert [(c, m) for c, m, _ in platform.updated] == [(CHANNEL, 9000)]
        assert platform.replies.count(replies.UPDATED) == 1

    @pytest.mark.asyncio
    async def test_other_users_are_not_blocked(self):
        """Test submissions by different users each create a card."""
        platform = FakePlatform()
        dispatcher = CommandDispatcher(make_settings(serialize_submissions=True), platform)

        await asyncio.gather(
            dispatcher.handle(make_message(PROFILE, author_id=USER)),
            dispatcher.handle(make_message(PROFILE, author_id=222)),
        )

        assert len(platform.sent) == 2
        assert sorted(user for _, user, _ in platform.granted) == [USER, 222]

    @pytest.mark.asyncio
    async def test_locks_are_released(self):
        """Test no per-user lock is kept once submissions are done."""
        platform = FakePlatform()
        dispatcher = CommandDispatcher(make_settings(serialize_submissions=True), platform)

        await asyncio.gather(
            dispatcher.handle(make_message(PROFILE)),
            dispatcher.handle(make_message(PROFILE)),
            dispatcher.handle(make_message(PROFILE, author_id=222)),
        )

        assert dispatcher._user_locks == {}
        assert dispatcher._lock_users == {}
