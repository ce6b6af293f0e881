"""
GraphQL schema and router.
"""

import inspect
from typing import List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.extensions import SchemaExtension
from strawberry.fastapi import GraphQLRouter
from strawberry.subscriptions import GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL
from strawberry.types import ExecutionContext

from level.core.errors import LevelError
from level.core.logging_config import get_logger
from level.core.monitoring import log_error

from .context import get_context
from .mutations import Mutation
from .queries import Query
from .subscriptions import Subscription

logger = get_logger(__name__)


class SerializedResolvers(SchemaExtension):
    """Run asynchronous resolvers of one request one at a time.

    graphql-core resolves sibling fields concurrently, but every resolver of a
    request works on the same database session.
    """

    def resolve(self, _next, root, info, *args, **kwargs):
        result = _next(root, info, *args, **kwargs)
        if not inspect.isawaitable(result):
            return result

        async def serialized():
            async with info.context.lock:
                return await result

        return serialized()


class LevelSchema(strawberry.Schema):
    def process_errors(
        self, errors: List[GraphQLError], execution_context: Optional[ExecutionContext] = None
    ) -> None:
        unexpected = []
        for error in errors:
            if isinstance(error.original_error, LevelError):
                logger.info(f"GraphQL {type(error.original_error).__name__} at {error.path}: {error.message}")
            else:
                unexpected.append(error)
                log_error(type(error.original_error or error).__name__, error.message, {"path": error.path})
        if unexpected:
            super().process_errors(unexpected, execution_context)


schema = LevelSchema(
    query=Query,
    mutation=Mutation,
    subscription=Subscription,
    extensions=[SerializedResolvers],
)


def create_graphql_router() -> GraphQLRouter:
    return GraphQLRouter(
        schema,
        context_getter=get_context,
        subscription_protocols=[GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL],
    )
