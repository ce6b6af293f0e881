import pytest

from level.core.errors import ValidationError
from level.server.services import ReplyService, SearchService


@pytest.fixture
def search(session, broker) -> SearchService:
    return SearchService(session, broker)


@pytest.fixture
async def team(factory):
    space, owner = await factory.space()
    member = await factory.member(space)
    group = await factory.default_group(space)
    return owner, member, group


class TestSearchPosts:
    async def test_matches_post_body_ignoring_case(self, search, team, factory):
        owner, member, group = team
        hit = await factory.post(owner, group, "Quarterly ROADMAP review")
        await factory.post(owner, group, "Lunch plans")

        page = await search.search_posts(member, "roadmap")

        assert [p.id for p in page.nodes] == [hit.id]

    async def test_matches_live_replies_only(self, search, team, factory):
        owner, member, group = team
        post = await factory.post(owner, group, "Status")
        reply = await factory.reply(member, post, "The invoice is attached")

        assert [p.id for p in (await search.search_posts(owner, "invoice")).nodes] == [post.id]

        await factory.service(ReplyService).delete_reply(member, post, reply)
        assert (await search.search_posts(owner, "invoice")).nodes == []

    async def test_private_groups_are_hidden(self, search, team, factory):
        owner, member, _ = team
        secret = await factory.group(owner, is_private=True)
        await factory.post(owner, secret, "Secret budget")

        assert (await search.search_posts(member, "budget")).nodes == []
        assert len((await search.search_posts(owner, "budget")).nodes) == 1

    async def test_wildcards_are_literal(self, search, team, factory):
        owner, member, group = team
        await factory.post(owner, group, "Nothing special here")
        hit = await factory.post(owner, group, "Growth is 50% this month")

        assert [p.id for p in (await search.search_posts(member, "%")).nodes] == [hit.id]
        assert (await search.search_posts(member, "_x_")).nodes == []

    async def test_other_spaces_are_excluded(self, search, team, factory):
        _, member, _ = team
        other_space, stranger = await factory.space()
        await factory.post(stranger, await factory.default_group(other_space), "Roadmap")

        assert (await search.search_posts(member, "roadmap")).nodes == []

    @pytest.mark.parametrize("query", ["", "   "])
    async def test_blank_query(self, search, team, query):
        _, member, _ = team
        with pytest.raises(ValidationError) as info:
            await search.search_posts(member, query)
        assert str(info.value) == "query can't be blank"

    async def test_non_ascii_text_ignores_case(self, search, team, factory):
        owner, member, group = team
        hit = await factory.post(owner, group, "Rentrée à l'École lundi")

        assert [p.id for p in (await search.search_posts(member, "école")).nodes] == [hit.id]
        assert [p.id for p in (await search.search_posts(member, "RENTRÉE")).nodes] == [hit.id]
