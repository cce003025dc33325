"""API endpoints for the Slack assistant."""

from datetime import UTC, datetime

from fastapi import APIRouter, Request, Response

from slackbot import __version__
from slackbot.clients.slack import get_request_handler
from slackbot.models.health import HealthResponse
from slackbot.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/slack/events", tags=["Slack"])
async def slack_events(request: Request) -> Response:
    """Receive Slack Events API callbacks.

    Signature verification, URL verification challenges and acknowledgement
    are handled by Bolt; answering happens after the request is acknowledged.
    """
    return await get_request_handler().handle(request)


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(UTC),
        version=__version__,
    )
