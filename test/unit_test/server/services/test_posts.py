import pytest

from level.core.database.pagination import PageArgs
from level.core.errors import ForbiddenError, NotFoundError, ValidationError
from level.core.models.domain.enums import (
    FollowingFilter,
    InboxFilter,
    InboxState,
    NotificationEvent,
    PostLogEvent,
    PostOrderField,
    PostState,
    PostStateFilter,
    SubscriptionState,
)
from level.server.services import GroupService, MentionService, PostService, ReplyService


@pytest.fixture
def posts(session, broker) -> PostService:
    return PostService(session, broker)


@pytest.fixture
async def team(factory):
    space, owner = await factory.space()
    alice = await factory.member(space, handle="alice")
    bob = await factory.member(space, handle="bob")
    group = await factory.default_group(space)
    return owner, alice, bob, group


async def _state(posts, space_user, post):
    return await posts.get_post_user(space_user, post)


class TestCreatePost:
    async def test_author_is_subscribed_without_inbox_entry(self, posts, team, broker, drain):
        _, alice, _, group = team

        async with broker.subscribe(f"group:{group.id}") as subscription:
            post = await posts.create_post(alice, group, "  Shipping today  ")
            events = await drain(subscription)

        assert post.body == "Shipping today"
        assert post.state == PostState.OPEN
        author_state = await _state(posts, alice, post)
        assert author_state.subscription_state == SubscriptionState.SUBSCRIBED
        assert author_state.inbox_state == InboxState.EXCLUDED
        assert [log.event for log in await posts.list_logs(post)] == [PostLogEvent.POST_CREATED]
        assert [e.type for e in events] == ["POST_CREATED"]

    async def test_blank_body(self, posts, team):
        _, alice, _, group = team
        with pytest.raises(ValidationError) as info:
            await posts.create_post(alice, group, "   ")
        assert info.value.errors[0].attribute == "body"

    async def test_closed_group(self, posts, team, session, broker):
        owner, alice, _, group = team
        await GroupService(session, broker).close_group(owner, group)

        with pytest.raises(ValidationError) as info:
            await posts.create_post(alice, group, "Anyone?")
        assert (info.value.errors[0].attribute, info.value.errors[0].message) == ("group", "is closed")

    async def test_watchers_get_the_post_in_their_inbox(self, posts, team, session, broker):
        _, alice, bob, group = team
        await GroupService(session, broker).watch(bob, group)

        post = await posts.create_post(alice, group, "For the watchers")

        bob_state = await _state(posts, bob, post)
        assert bob_state.inbox_state == InboxState.UNREAD
        assert bob_state.subscription_state == SubscriptionState.SUBSCRIBED
        notifications = await posts.repos.notifications.list_undismissed([bob.id])
        assert [n.event for n in notifications] == [NotificationEvent.POST_CREATED]

    async def test_mentions_pull_the_post_into_the_inbox(self, posts, team):
        _, alice, bob, group = team

        post = await posts.create_post(alice, group, "Hey @Bob, take a look (and @alice too)")

        bob_state = await _state(posts, bob, post)
        assert bob_state.inbox_state == InboxState.UNREAD
        assert bob_state.subscription_state == SubscriptionState.SUBSCRIBED
        mentions = await MentionService(posts.session).list_mentions(bob, post)
        assert [m.mentioner_id for m in mentions] == [alice.id]
        assert await MentionService(posts.session).list_mentions(alice, post) == []

        notification = (await posts.repos.notifications.list_undismissed([bob.id]))[0]
        assert notification.data["mentioned"] is True
        assert notification.topic == f"post:{post.id}"

    async def test_mentions_skip_members_who_cannot_see_the_post(self, posts, team, session, broker):
        owner, alice, bob, _ = team
        secret = await GroupService(session, broker).create_group(alice, name="Secret", is_private=True)

        post = await posts.create_post(alice, secret, "@bob should not know")

        assert await _state(posts, bob, post) is None
        with pytest.raises(NotFoundError):
            await posts.get_post(bob, post.id)


class TestEditing:
    async def test_author_and_admins_edit(self, posts, team, broker, drain):
        owner, alice, bob, group = team
        post = await posts.create_post(alice, group, "Draft")

        async with broker.subscribe(f"post:{post.id}") as subscription:
            await posts.update_post(alice, post, "Final")
            events = await drain(subscription)
        await posts.update_post(owner, post, "Final, edited by the owner")

        assert post.body == "Final, edited by the owner"
        assert [e.type for e in events] == ["POST_UPDATED"]
        with pytest.raises(ForbiddenError):
            await posts.update_post(bob, post, "Hijacked")

    async def test_close_and_reopen(self, posts, team, session, broker):
        _, alice, bob, group = team
        post = await posts.create_post(alice, group, "Question")
        await ReplyService(session, broker).create_reply(bob, post, "Answer")
        await ReplyService(session, broker).create_reply(alice, post, "Thanks")

        await posts.close_post(bob, post)
        await posts.close_post(bob, post)

        assert post.state == PostState.CLOSED
        assert (await _state(posts, bob, post)).inbox_state == InboxState.DISMISSED
        notifications = await posts.repos.notifications.list_undismissed([alice.id])
        closed = [n for n in notifications if n.event == NotificationEvent.POST_CLOSED]
        assert len(closed) == 1

        await posts.reopen_post(alice, post)
        assert post.state == PostState.OPEN
        events = [log.event for log in await posts.list_logs(post)]
        assert events.count(PostLogEvent.POST_CLOSED) == 1
        assert PostLogEvent.POST_REOPENED in events


class TestInbox:
    async def test_read_unread_and_dismiss(self, posts, team):
        _, alice, bob, group = team
        post = await posts.create_post(alice, group, "Ping @bob")

        await posts.mark_as_read(bob, [post])
        assert (await _state(posts, bob, post)).inbox_state == InboxState.READ

        await posts.mark_as_unread(bob, [post])
        assert (await _state(posts, bob, post)).inbox_state == InboxState.UNREAD

        await posts.dismiss(bob, [post])
        assert (await _state(posts, bob, post)).inbox_state == InboxState.DISMISSED
        assert await MentionService(posts.session).list_mentions(bob, post) == []

    async def test_get_posts_requires_every_post(self, posts, team):
        _, alice, bob, group = team
        post = await posts.create_post(alice, group, "One")

        assert [p.id for p in await posts.get_posts(bob, [post.id, post.id])] == [post.id]
        with pytest.raises(NotFoundError):
            await posts.get_posts(bob, [post.id, "missing"])

    async def test_subscription_toggles(self, posts, team, broker, drain):
        _, alice, bob, group = team
        post = await posts.create_post(alice, group, "Follow me")

        async with broker.subscribe(f"space_user:{bob.id}") as subscription:
            await posts.subscribe(bob, post)
            assert (await _state(posts, bob, post)).subscription_state == SubscriptionState.SUBSCRIBED
            await posts.unsubscribe(bob, post)
            events = await drain(subscription)

        assert (await _state(posts, bob, post)).subscription_state == SubscriptionState.UNSUBSCRIBED
        assert [e.type for e in events] == ["POSTS_SUBSCRIBED", "POSTS_UNSUBSCRIBED"]


class TestListPosts:
    async def test_filters(self, posts, team):
        owner, alice, bob, group = team
        mentioned = await posts.create_post(alice, group, "Hi @bob")
        plain = await posts.create_post(alice, group, "General news")
        closed = await posts.create_post(owner, group, "Done deal")
        await posts.close_post(owner, closed)

        def ids(page):
            return {p.id for p in page.nodes}

        everything = await posts.list_posts(bob, PageArgs(first=10))
        assert ids(everything) == {mentioned.id, plain.id, closed.id}

        unread = await posts.list_posts(bob, PageArgs(first=10), inbox=InboxFilter.UNREAD)
        assert ids(unread) == {mentioned.id}

        open_posts = await posts.list_posts(bob, PageArgs(first=10), state=PostStateFilter.OPEN)
        assert ids(open_posts) == {mentioned.id, plain.id}

        following = await posts.list_posts(bob, PageArgs(first=10), following=FollowingFilter.IS_FOLLOWING)
        assert ids(following) == {mentioned.id}

    async def test_order_by_last_activity(self, posts, team, session, broker):
        _, alice, bob, group = team
        older = await posts.create_post(alice, group, "Older")
        await posts.create_post(alice, group, "Newer")
        await ReplyService(session, broker).create_reply(bob, older, "Bumping this")

        page = await posts.list_posts(bob, PageArgs(first=1), order_field=PostOrderField.LAST_ACTIVITY_AT)
        assert [p.id for p in page.nodes] == [older.id]

    async def test_group_scope(self, posts, team, session, broker):
        owner, alice, _, group = team
        other = await GroupService(session, broker).create_group(owner, name="Other")
        await posts.create_post(alice, group, "In everyone")
        elsewhere = await posts.create_post(owner, other, "In other")

        page = await posts.list_posts(alice, PageArgs(first=10), group=other)
        assert [p.id for p in page.nodes] == [elsewhere.id]
