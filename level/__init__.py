"""Level.

Backend for the Level team communication app: spaces, groups, posts,
replies, reactions, an inbox per member, mentions, notifications and
scheduled digests, served through a GraphQL API.

High-level architecture
-----------------------

- ``level.core``:

  - ``database``: SQLModel entities, async repositories, engine/session helpers
    and cursor pagination.
  - ``models``: Pydantic I/O schemas and domain enums shared by services and API.
  - Logging, monitoring and the domain error hierarchy.

- ``level.server``:

  - ``services``: the domain operations (creating posts, moving posts through the
    inbox, recording mentions, building digests, publishing events).
  - ``graphql``: the Strawberry schema (queries, mutations, subscriptions).
  - ``api.v1``: the small REST surface (health, sign up, log in).

Typical workflow
----------------

1. A user signs up (``POST /api/v1/users``) and receives a JWT.
2. They create a space, which also creates the default "Everyone" group.
3. Members post into groups, reply, react and mention each other; every write
   updates the inbox of the affected members and is pushed to subscribers.
"""

__version__ = "0.1.0"
