# /hello endpoint
# magicstream/api/endpoints/health.py

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

router = APIRouter()

GREETING = "Hello, MagicStreamMovies!"

@router.get(
    "/hello",
    response_class=PlainTextResponse,
    status_code=status.HTTP_200_OK,
    summary="Greeting",
    response_description="A fixed greeting confirming the API is running.",
)
async def hello():
    """Liveness check, needs no authentication and touches no backing service."""
    return GREETING
