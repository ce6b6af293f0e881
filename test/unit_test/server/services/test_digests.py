from datetime import datetime, timedelta

import pytest

from level.core.database.base import utc_now
from level.core.errors import NotFoundError, ValidationError
from level.server.services import DigestService
from level.server.services.digests import SECTION_POST_LIMIT, local_time


@pytest.fixture
def digests(session, broker) -> DigestService:
    return DigestService(session, broker)


@pytest.fixture
async def team(factory):
    space, owner = await factory.space(name="Acme", slug="acme")
    alice = await factory.member(space, handle="alice", time_zone="America/Chicago")
    group = await factory.default_group(space)
    return space, owner, alice, group


def test_local_time():
    now = datetime(2026, 1, 15, 14, 30)

    assert local_time(now, "America/Chicago") == datetime.fromisoformat("2026-01-15T08:30:00-06:00")
    assert local_time(now, None).hour == 14
    assert local_time(now, "Not/AZone").hour == 14


class TestNudges:
    async def test_create_and_list(self, digests, team):
        _, _, alice, _ = team
        late = await digests.create_nudge(alice, 1020)
        early = await digests.create_nudge(alice, 480)

        assert [n.id for n in await digests.list_nudges(alice)] == [early.id, late.id]

    async def test_duplicate_minute(self, digests, team):
        _, _, alice, _ = team
        await digests.create_nudge(alice, 480)

        with pytest.raises(ValidationError) as info:
            await digests.create_nudge(alice, 480)
        assert info.value.errors[0].attribute == "minute"

    @pytest.mark.parametrize("minute", [-1, 1440])
    async def test_out_of_range(self, digests, team, minute):
        _, _, alice, _ = team
        with pytest.raises(ValidationError):
            await digests.create_nudge(alice, minute)

    async def test_delete_own_only(self, digests, team):
        _, owner, alice, _ = team
        nudge = await digests.create_nudge(alice, 480)

        with pytest.raises(NotFoundError):
            await digests.delete_nudge(owner, nudge.id)

        await digests.delete_nudge(alice, nudge.id)
        assert await digests.list_nudges(alice) == []


class TestBuildDigest:
    async def test_build_time_is_recorded(self, digests, team):
        _, _, alice, _ = team
        now = datetime(2026, 5, 4, 12, 0, 0)

        digest = await digests.build_digest(
            alice, key="weekly", title="Weekly", start_at=now - timedelta(days=7), end_at=now, now=now
        )

        assert digest.inserted_at == now
        assert (digest.start_at, digest.end_at) == (now - timedelta(days=7), now)

    async def test_sections(self, digests, team, factory):
        _, owner, alice, group = team
        mentioned = await factory.post(owner, group, "@alice please review")
        quiet = await factory.post(owner, group, "FYI")
        now = utc_now()

        digest = await digests.build_digest(
            alice, key="daily", title="Daily digest", start_at=now - timedelta(days=1), end_at=now + timedelta(minutes=1)
        )

        assert digest.subject == "[Acme] Daily digest"
        assert digest.time_zone == "America/Chicago"
        inbox, recent = await digests.list_sections(digest)
        assert (inbox.title, recent.title) == ("Inbox", "Recent activity")
        assert inbox.summary == "You have 1 unread post in your inbox."
        assert inbox.link_url == "/acme/inbox"
        assert [p.id for p in await digests.list_section_posts(inbox)] == [mentioned.id]
        assert {p.id for p in await digests.list_section_posts(recent)} == {mentioned.id, quiet.id}

    async def test_quiet_day(self, digests, team):
        _, _, alice, _ = team
        now = utc_now()

        digest = await digests.build_digest(
            alice, key="empty", title="Daily digest", start_at=now - timedelta(days=1), end_at=now
        )

        inbox, recent = await digests.list_sections(digest)
        assert inbox.summary == "Congratulations! You've achieved Inbox Zero."
        assert recent.summary == "There has been no activity in your groups."
        assert await digests.list_section_posts(recent) == []

    async def test_recent_section_is_capped(self, digests, team, factory):
        _, owner, alice, group = team
        for n in range(SECTION_POST_LIMIT + 2):
            await factory.post(owner, group, f"Post {n}")
        now = utc_now()

        digest = await digests.build_digest(
            alice, key="busy", title="Daily digest", start_at=now - timedelta(days=1), end_at=now + timedelta(minutes=1)
        )

        _, recent = await digests.list_sections(digest)
        assert len(await digests.list_section_posts(recent)) == SECTION_POST_LIMIT

    async def test_same_key_is_built_once(self, digests, team):
        _, _, alice, _ = team
        now = utc_now()
        first = await digests.build_digest(alice, key="k", title="One", start_at=now, end_at=now)
        second = await digests.build_digest(alice, key="k", title="Two", start_at=now, end_at=now)

        assert first.id == second.id
        assert second.title == "One"

    async def test_get_digest_of_other_member(self, digests, team):
        _, owner, alice, _ = team
        now = utc_now()
        digest = await digests.build_digest(alice, key="k", title="Mine", start_at=now, end_at=now)

        assert (await digests.get_digest(alice, digest.id)).id == digest.id
        with pytest.raises(NotFoundError):
            await digests.get_digest(owner, digest.id)


class TestNudgeDigests:
    async def test_due_nudges_use_local_time(self, digests, team):
        _, owner, alice, _ = team
        # 14:00 UTC is 08:00 in Chicago in January
        chicago = await digests.create_nudge(alice, 480)
        await digests.create_nudge(owner, 480)
        now = datetime(2026, 1, 15, 14, 0, 30)

        assert [nudge.id for nudge, _ in await digests.due_nudges(now)] == [chicago.id]

    async def test_send_is_idempotent_per_local_day(self, digests, team):
        _, _, alice, _ = team
        nudge = await digests.create_nudge(alice, 480)
        now = datetime(2026, 1, 15, 14, 0)

        sent = await digests.send_nudge_digests(now)
        again = await digests.send_nudge_digests(now + timedelta(seconds=20))

        assert [d.key for d in sent] == [f"nudge:{nudge.id}:2026-01-15"]
        assert [d.id for d in again] == [d.id for d in sent]
        assert await digests.send_nudge_digests(now + timedelta(minutes=1)) == []
