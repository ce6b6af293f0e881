"""Static values used when building the FastAPI application."""

PROJECT_NAME = "Level"
API_V1_STR = "/api/v1"
GRAPHQL_PATH = "/graphql"
API_VERSION = "0.1.0"
SCHEMA_VERSION = "v1"
