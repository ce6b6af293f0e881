import pytest

VIEWER = "query { viewer { id handle displayName spaces { slug } } }"

CREATE_SPACE = """
mutation($name: String!, $slug: String!) {
  createSpace(name: $name, slug: $slug) {
    success
    errors { attribute message }
    space { id slug openInvitationToken }
    spaceUser { role }
  }
}
"""

CREATE_POST = """
mutation($spaceId: ID!, $groupId: ID!, $body: String!) {
  createPost(spaceId: $spaceId, groupId: $groupId, body: $body) {
    success
    errors { attribute message }
    post { id body bodyHtml state }
  }
}
"""

REACT = """
mutation($spaceId: ID!, $postId: ID!, $value: String!) {
  createPostReaction(spaceId: $spaceId, postId: $postId, value: $value) {
    success
    errors { attribute message }
    post { id hasReacted }
  }
}
"""

SPACE_POSTS = """
query($slug: String!) {
  space(slug: $slug) {
    posts(first: 10) {
      totalCount
      nodes { body author { handle } }
      pageInfo { hasNextPage }
    }
  }
}
"""


class TestViewer:
    async def test_viewer(self, graphql, factory):
        user = await factory.user(handle="dana")
        await factory.space(owner=user, slug="acme")

        body = await graphql(VIEWER, user=user)

        assert "errors" not in body
        assert body["data"]["viewer"]["handle"] == "dana"
        assert body["data"]["viewer"]["displayName"] == "Test " + user.last_name
        assert body["data"]["viewer"]["spaces"] == [{"slug": "acme"}]

    async def test_anonymous(self, graphql):
        body = await graphql(VIEWER)

        assert body["data"] is None
        assert body["errors"][0]["message"] == "You must be logged in"


class TestMutations:
    async def test_create_space(self, graphql, factory):
        user = await factory.user()

        body = await graphql(CREATE_SPACE, {"name": "Acme", "slug": "acme"}, user=user)

        payload = body["data"]["createSpace"]
        assert payload["success"] is True
        assert payload["errors"] == []
        assert payload["space"]["slug"] == "acme"
        assert payload["space"]["openInvitationToken"]
        assert payload["spaceUser"]["role"] == "OWNER"

    async def test_validation_errors_are_returned_in_the_payload(self, graphql, factory):
        user = await factory.user()

        body = await graphql(CREATE_SPACE, {"name": "Acme", "slug": "not a slug!"}, user=user)

        assert "errors" not in body
        payload = body["data"]["createSpace"]
        assert payload["success"] is False
        assert payload["space"] is None
        assert payload["errors"] == [
            {"attribute": "slug", "message": "must contain letters, numbers, and dashes only"}
        ]

    async def test_post_and_react(self, graphql, factory):
        space, owner = await factory.space()
        member = await factory.member(space)
        member_user = await factory.account(member)
        group = await factory.default_group(space)

        created = await graphql(
            CREATE_POST, {"spaceId": space.id, "groupId": group.id, "body": "**Hi** @nobody"}, user=member_user
        )
        post = created["data"]["createPost"]["post"]
        assert created["data"]["createPost"]["success"] is True
        assert post["body"] == "**Hi** @nobody"
        assert post["bodyHtml"].startswith("<p><strong>Hi</strong>")
        assert post["state"] == "OPEN"

        reacted = await graphql(REACT, {"spaceId": space.id, "postId": post["id"], "value": "👍"}, user=member_user)
        assert reacted["data"]["createPostReaction"] == {
            "success": True,
            "errors": [],
            "post": {"id": post["id"], "hasReacted": True},
        }

    async def test_blank_post(self, graphql, factory):
        space, owner = await factory.space()
        group = await factory.default_group(space)
        user = await factory.account(owner)

        body = await graphql(CREATE_POST, {"spaceId": space.id, "groupId": group.id, "body": " "}, user=user)

        payload = body["data"]["createPost"]
        assert payload["success"] is False
        assert payload["errors"] == [{"attribute": "body", "message": "can't be blank"}]


class TestQueries:
    async def test_space_posts(self, graphql, factory):
        space, owner = await factory.space(slug="acme")
        group = await factory.default_group(space)
        await factory.post(owner, group, "First")
        await factory.post(owner, group, "Second")
        user = await factory.account(owner)

        body = await graphql(SPACE_POSTS, {"slug": "acme"}, user=user)

        posts = body["data"]["space"]["posts"]
        assert posts["totalCount"] == 2
        assert {n["body"] for n in posts["nodes"]} == {"First", "Second"}
        assert posts["pageInfo"]["hasNextPage"] is False

    async def test_unknown_space(self, graphql, factory):
        user = await factory.user()

        body = await graphql(SPACE_POSTS, {"slug": "missing"}, user=user)

        assert body["data"] is None
        assert body["errors"][0]["message"] == "Space not found"

    async def test_notifications(self, graphql, factory):
        space, owner = await factory.space()
        member = await factory.member(space)
        post = await factory.post(owner, await factory.default_group(space))
        await factory.reply(member, post, "Seen it")
        user = await factory.account(owner)

        body = await graphql(
            "query { notifications(first: 5) { nodes { event topic state } } }",
            user=user,
        )

        assert body["data"]["notifications"]["nodes"] == [
            {"event": "REPLY_CREATED", "topic": f"post:{post.id}", "state": "UNDISMISSED"}
        ]
