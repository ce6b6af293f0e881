"""
Liveness and version endpoints for load balancers and deploy checks.
"""

from fastapi import APIRouter

from level.server.core import constant

router = APIRouter()


@router.get("/health", summary="Health Check", description="Liveness probe; answers as long as the process serves requests.")
async def health_check():
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Version of the running server and of the GraphQL schema it exposes.",
)
async def version():
    """Report the server and schema versions."""
    return {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}
