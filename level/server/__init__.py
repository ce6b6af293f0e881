"""
Level Server Package.

This package contains the web server of Level: the FastAPI application, the
GraphQL API, the REST endpoints for sign up and log in, and the domain
services behind them.

Subpackages:
    api: REST route definitions (health, sign up, log in).
    core: Configuration, constants and security helpers.
    graphql: Strawberry schema, context and router.
    services: Business logic working on the database layer.
    middleware: Request timing and logging.
    exception_handlers: Mapping of errors to HTTP responses.
"""
