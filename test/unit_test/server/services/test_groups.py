import pytest

from level.core.database.pagination import PageArgs
from level.core.errors import ForbiddenError, NotFoundError, ValidationError
from level.core.models.domain.enums import GroupRole, GroupState
from level.server.services import GroupService


@pytest.fixture
def groups(session, broker) -> GroupService:
    return GroupService(session, broker)


@pytest.fixture
async def team(factory):
    space, owner = await factory.space()
    member = await factory.member(space)
    return space, owner, member


class TestLifecycle:
    async def test_create_group(self, groups, team, broker, drain):
        _, _, member = team

        async with broker.subscribe(f"space_user:{member.id}") as subscription:
            group = await groups.create_group(member, name="Engineering", description="Builders")
            events = await drain(subscription)

        assert group.creator_id == member.id
        assert group.state == GroupState.OPEN
        assert (await groups.get_membership(member, group)).role == GroupRole.OWNER
        assert await groups.is_bookmarked(member, group)
        assert [e.type for e in events] == ["GROUP_BOOKMARKED"]

    async def test_names_are_unique_per_space_ignoring_case(self, groups, team, factory):
        _, owner, _ = team
        await groups.create_group(owner, name="Engineering")

        with pytest.raises(ValidationError) as info:
            await groups.create_group(owner, name="engineering")
        assert info.value.errors[0].attribute == "name"

        _, other_owner = await factory.space()
        assert (await groups.create_group(other_owner, name="Engineering")).name == "Engineering"

    async def test_update_by_group_owner(self, groups, team, broker, drain):
        _, _, member = team
        group = await groups.create_group(member, name="Design")

        async with broker.subscribe(f"group:{group.id}") as subscription:
            await groups.update_group(member, group, name="Product Design", is_private=True)
            events = await drain(subscription)

        assert (group.name, group.is_private) == ("Product Design", True)
        assert [e.type for e in events] == ["GROUP_UPDATED"]

    async def test_plain_members_cannot_manage(self, groups, team, factory):
        space, owner, _ = team
        group = await groups.create_group(owner, name="Ops")
        stranger = await factory.member(space)
        await groups.subscribe(stranger, group)

        with pytest.raises(ForbiddenError):
            await groups.update_group(stranger, group, name="Mine")
        with pytest.raises(ForbiddenError):
            await groups.close_group(stranger, group)

    async def test_space_admins_manage_every_group(self, groups, team):
        _, owner, member = team
        group = await groups.create_group(member, name="Side project")

        await groups.close_group(owner, group)
        assert group.state == GroupState.CLOSED
        await groups.reopen_group(owner, group)
        assert group.state == GroupState.OPEN


class TestVisibility:
    async def test_private_groups_are_hidden_from_non_members(self, groups, team):
        _, owner, member = team
        secret = await groups.create_group(owner, name="Secret", is_private=True)

        with pytest.raises(NotFoundError):
            await groups.get_group(member, secret.id)
        with pytest.raises(NotFoundError):
            await groups.subscribe(member, secret)
        assert (await groups.get_group(owner, secret.id)).id == secret.id

    async def test_list_groups_filters_by_state(self, groups, team):
        _, owner, member = team
        await groups.create_group(owner, name="Alpha")
        beta = await groups.create_group(owner, name="Beta")
        await groups.create_group(owner, name="Hidden", is_private=True)
        await groups.close_group(owner, beta)

        everything = await groups.list_groups(member, PageArgs(first=10))
        assert [g.name for g in everything.nodes] == ["Alpha", "Beta", "Everyone"]

        open_only = await groups.list_groups(member, PageArgs(first=10), state=GroupState.OPEN)
        assert [g.name for g in open_only.nodes] == ["Alpha", "Everyone"]


class TestMembership:
    async def test_subscribe_and_unsubscribe(self, groups, team, broker, drain):
        _, owner, member = team
        group = await groups.create_group(owner, name="Random")

        async with broker.subscribe(f"space_user:{member.id}", f"group:{group.id}") as subscription:
            membership = await groups.subscribe(member, group)
            again = await groups.subscribe(member, group)
            await groups.unsubscribe(member, group)
            events = await drain(subscription)

        assert membership.id == again.id
        assert membership.role == GroupRole.MEMBER
        assert await groups.get_membership(member, group) is None
        assert [e.type for e in events] == [
            "SUBSCRIBED_TO_GROUP",
            "GROUP_MEMBERSHIP_UPDATED",
            "UNSUBSCRIBED_FROM_GROUP",
            "GROUP_MEMBERSHIP_UPDATED",
        ]

    async def test_watch_joins_the_group(self, groups, team):
        _, owner, member = team
        group = await groups.create_group(owner, name="Announcements")

        membership = await groups.watch(member, group)
        assert membership.is_watching

        await groups.unwatch(member, group)
        membership = await groups.get_membership(member, group)
        assert membership is not None and not membership.is_watching

    async def test_list_memberships(self, groups, team):
        _, owner, member = team
        group = await groups.create_group(owner, name="Crew")
        await groups.subscribe(member, group)

        page = await groups.list_memberships(group, PageArgs(first=10))
        assert {m.space_user_id for m in page.nodes} == {owner.id, member.id}


class TestBookmarks:
    async def test_bookmark_is_idempotent(self, groups, team):
        _, owner, member = team
        group = await groups.create_group(owner, name="Reading")

        await groups.bookmark(member, group)
        await groups.bookmark(member, group)
        assert [g.name for g in await groups.list_bookmarks(member)] == ["Everyone", "Reading"]

        await groups.unbookmark(member, group)
        await groups.unbookmark(member, group)
        assert not await groups.is_bookmarked(member, group)
