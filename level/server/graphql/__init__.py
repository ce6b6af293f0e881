"""
GraphQL API: schema, request context and the FastAPI router serving ``/graphql``.
"""

from .context import LevelContext, get_context
from .schema import create_graphql_router, schema

__all__ = ["LevelContext", "create_graphql_router", "get_context", "schema"]
