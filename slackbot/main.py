"""Main FastAPI application."""

from fastapi import FastAPI

from slackbot import __version__
from slackbot.api.endpoints import router
from slackbot.utils.logging import setup_logging

setup_logging()

app = FastAPI(
    title="Slack Assistant",
    description=(
        "A Slack bot that answers messages in threads, calling weather, web search "
        "and remotely discovered tools along the way."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    tags_metadata=[
        {
            "name": "Slack",
            "description": "Slack Events API endpoint for messages and mentions.",
        },
        {
            "name": "Health",
            "description": "Service health monitoring and status checks.",
        },
    ],
)

app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("slackbot.main:app", host="0.0.0.0", port=8000, log_level="info")
