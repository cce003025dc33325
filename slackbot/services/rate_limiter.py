"""Per-user rate limiting for incoming Slack events."""

from limits import parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from slackbot.utils.logging import get_logger

logger = get_logger(__name__)


class UserRateLimiter:
    """Moving-window limiter keyed by Slack user ID."""

    def __init__(self, requests_per_minute: int = 10):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Maximum answered events per user per minute
        """
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)
        self.request_limit = parse(f"{requests_per_minute}/minute")

    def allow(self, user_id: str | None) -> bool:
        """Record an event for the user and report whether it fits the budget."""
        identifier = user_id or "anonymous"
        if self.limiter.hit(self.request_limit, "slack_user", identifier):
            return True

        logger.warning(f"Rate limit exceeded for user {identifier}")
        return False
