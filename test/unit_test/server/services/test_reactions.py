import pytest

from level.core.errors import NotFoundError, ValidationError
from level.core.models.domain.enums import NotificationEvent
from level.server.services import ReactionService


@pytest.fixture
def reactions(session, broker) -> ReactionService:
    return ReactionService(session, broker)


@pytest.fixture
async def thread(factory):
    space, _ = await factory.space()
    alice = await factory.member(space, handle="alice")
    bob = await factory.member(space, handle="bob")
    post = await factory.post(alice, await factory.default_group(space), "Ship it")
    return alice, bob, post


class TestPostReactions:
    async def test_react_once_per_value(self, reactions, thread, broker, drain):
        alice, bob, post = thread

        async with broker.subscribe(f"post:{post.id}") as subscription:
            first = await reactions.create_post_reaction(bob, post, "👍")
            second = await reactions.create_post_reaction(bob, post, "👍")
            events = await drain(subscription)

        assert first.id == second.id
        assert await reactions.has_reacted_to_post(bob, post)
        assert not await reactions.has_reacted_to_post(alice, post)
        assert [r.id for r in await reactions.list_post_reactions(post)] == [first.id]
        assert [e.type for e in events] == ["POST_REACTION_CREATED"]

    async def test_author_is_notified(self, reactions, thread):
        alice, bob, post = thread
        await reactions.create_post_reaction(bob, post, "🎉")

        notifications = await reactions.repos.notifications.list_undismissed([alice.id])
        assert [n.event for n in notifications] == [NotificationEvent.POST_REACTION_CREATED]
        assert notifications[0].topic == f"post:{post.id}"
        assert notifications[0].data["value"] == "🎉"

    async def test_own_reaction_is_silent(self, reactions, thread):
        alice, _, post = thread
        await reactions.create_post_reaction(alice, post, "👍")

        assert await reactions.repos.notifications.list_undismissed([alice.id]) == []

    async def test_delete(self, reactions, thread):
        _, bob, post = thread
        await reactions.create_post_reaction(bob, post, "👍")

        await reactions.delete_post_reaction(bob, post, "👍")

        assert not await reactions.has_reacted_to_post(bob, post)
        with pytest.raises(NotFoundError) as info:
            await reactions.delete_post_reaction(bob, post, "👍")
        assert str(info.value) == "Reaction not found"

    @pytest.mark.parametrize("value", ["", "   ", "x" * 17])
    async def test_invalid_value(self, reactions, thread, value):
        _, bob, post = thread
        with pytest.raises(ValidationError):
            await reactions.create_post_reaction(bob, post, value)


class TestReplyReactions:
    async def test_reply_author_is_notified_on_reply_topic(self, reactions, thread, factory):
        alice, bob, post = thread
        reply = await factory.reply(bob, post, "Done")

        reaction = await reactions.create_reply_reaction(alice, post, reply, "❤️")

        assert reaction.reply_id == reply.id
        assert await reactions.has_reacted_to_reply(alice, reply)
        notifications = [
            n
            for n in await reactions.repos.notifications.list_undismissed([bob.id])
            if n.event == NotificationEvent.REPLY_REACTION_CREATED
        ]
        assert [n.topic for n in notifications] == [f"reply:{reply.id}"]

    async def test_delete(self, reactions, thread, factory):
        alice, bob, post = thread
        reply = await factory.reply(bob, post)
        await reactions.create_reply_reaction(alice, post, reply, "👀")

        await reactions.delete_reply_reaction(alice, post, reply, "👀")

        assert await reactions.list_reply_reactions(reply) == []
        with pytest.raises(NotFoundError):
            await reactions.delete_reply_reaction(alice, post, reply, "👀")
