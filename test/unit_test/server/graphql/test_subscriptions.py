import asyncio
import inspect

import pytest

from level.core.models.domain.enums import SpaceUserState
from level.server.graphql.context import LevelContext
from level.server.graphql.schema import schema
from level.server.services import AccountService, Event, GroupService

POST_EVENTS = """
subscription($spaceId: ID!, $postId: ID!) {
  postEvents(spaceId: $spaceId, postId: $postId) { type post { id } }
}
"""


async def _open(query, variables, context):
    result = schema.subscribe(query, variable_values=variables, context_value=context)
    if inspect.isawaitable(result):
        result = await result
    return result


async def _wait_for_subscriber(broker, topic):
    # Opening a subscription runs database queries first
    for _ in range(500):
        if broker.subscriber_count(topic):
            return
        await asyncio.sleep(0.01)
    pytest.fail(f"nobody subscribed to {topic}")


async def test_post_events_are_relayed(session, broker, factory):
    space, owner = await factory.space()
    post = await factory.post(owner, await factory.default_group(space))
    context = LevelContext(session, broker)
    context.connection_params = {"token": AccountService.issue_token(await factory.account(owner))}

    stream = await _open(POST_EVENTS, {"spaceId": space.id, "postId": post.id}, context)
    next_result = asyncio.ensure_future(stream.__anext__())
    await _wait_for_subscriber(broker, f"post:{post.id}")

    broker.publish(f"post:{post.id}", Event("POST_UPDATED", {"post": post}))
    result = await asyncio.wait_for(next_result, timeout=5)
    await stream.aclose()

    assert result.errors is None
    assert result.data == {"postEvents": {"type": "POST_UPDATED", "post": {"id": post.id}}}


GROUP_EVENTS = """
subscription($spaceId: ID!, $groupId: ID!) {
  groupEvents(spaceId: $spaceId, groupId: $groupId) { type group { id } }
}
"""


async def test_group_events_stop_once_a_private_group_is_left(session, broker, factory):
    space, _ = await factory.space()
    member = await factory.member(space)
    group = await factory.group(member, is_private=True)
    context = LevelContext(session, broker)
    context.connection_params = {"token": AccountService.issue_token(await factory.account(member))}

    stream = await _open(GROUP_EVENTS, {"spaceId": space.id, "groupId": group.id}, context)
    next_result = asyncio.ensure_future(stream.__anext__())
    await _wait_for_subscriber(broker, f"group:{group.id}")

    await factory.service(GroupService).unsubscribe(member, group)

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(next_result, timeout=5)
    assert broker.subscriber_count(f"group:{group.id}") == 0


async def test_space_user_events_stop_once_the_membership_is_disabled(session, broker, factory):
    space, _ = await factory.space()
    member = await factory.member(space)
    context = LevelContext(session, broker)
    context.connection_params = {"token": AccountService.issue_token(await factory.account(member))}

    stream = await _open(
        "subscription($spaceId: ID!) { spaceUserEvents(spaceId: $spaceId) { type } }",
        {"spaceId": space.id},
        context,
    )
    next_result = asyncio.ensure_future(stream.__anext__())
    await _wait_for_subscriber(broker, f"space_user:{member.id}")

    member.state = SpaceUserState.DISABLED
    session.add(member)
    await session.commit()
    broker.publish(f"space_user:{member.id}", Event("SPACE_USER_UPDATED", {"space_user": member}))

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(next_result, timeout=5)
