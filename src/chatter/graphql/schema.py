"""
Main GraphQL schema definition using Strawberry
"""

from typing import Any

import strawberry
from graphql import get_introspection_query, graphql_sync
from graphql import validate_schema as gql_validate_schema
from starlette.requests import HTTPConnection
from strawberry.fastapi import GraphQLRouter
from strawberry.subscriptions import GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL

from ..config import settings
from ..logging import get_logger
from ..notifications import get_push_dispatcher
from .mutations.root import Mutation
from .queries.root import Query
from .subscriptions.root import Subscription

logger = get_logger(__name__)

schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    subscription=Subscription,
)


def validate_schema() -> None:
    """Fail at startup when the schema has unresolved types or cannot be introspected.

    Raises:
        RuntimeError: If validation or introspection reports errors
    """
    graphql_schema = schema._schema
    errors = [str(e) for e in gql_validate_schema(graphql_schema)]
    if not errors:
        result = graphql_sync(graphql_schema, get_introspection_query())
        errors = [str(e) for e in result.errors or []]

    if errors:
        logger.error("GraphQL schema is invalid", errors=errors)
        raise RuntimeError(f"GraphQL schema validation failed: {'; '.join(errors)}")
    logger.info("GraphQL schema validated")


def create_graphql_router() -> GraphQLRouter[dict[str, Any], None]:
    """Create a GraphQL router for FastAPI, serving HTTP and websocket clients."""

    async def get_context(connection: HTTPConnection) -> dict[str, Any]:
        """Get the context for GraphQL resolvers.

        `connection` is the HTTP request or the websocket. The pub/sub and the
        push dispatcher are created once at startup and shared by all requests.
        """
        state = connection.app.state
        return {
            "request": connection,
            "pubsub": getattr(state, "pubsub", None),
            "push_dispatcher": getattr(state, "push_dispatcher", None) or get_push_dispatcher(),
        }

    return GraphQLRouter(
        schema,
        path="/graphql",
        graphql_ide="graphiql" if settings.debug else None,
        context_getter=get_context,
        subscription_protocols=[GRAPHQL_TRANSPORT_WS_PROTOCOL, GRAPHQL_WS_PROTOCOL],
    )
