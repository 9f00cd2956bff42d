"""
Rate limiting using SlowAPI

Each application builds its own Limiter from the Settings it was created
with. Routes declare a RateLimit dependency that reads the limit string
from app.state.settings on every request, so nothing here depends on the
process-wide settings cache.

Keyed by the authenticated caller when the identity dependency has run,
otherwise by client IP.
"""
import logging

from fastapi import Request
from limits import parse_many
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from slowapi.wrappers import Limit

from airbooking.core.config import Settings

logger = logging.getLogger(__name__)


def get_identifier(request: Request) -> str:
    user_id = getattr(request.state, 'user_id', None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


def build_limiter(settings: Settings) -> Limiter:
    return Limiter(
        key_func=get_identifier,
        storage_uri=settings.RATE_LIMIT_STORAGE_URI,
        strategy="fixed-window",
        enabled=settings.RATE_LIMIT_ENABLED,
    )


class RateLimit:
    """
    Dependency enforcing one configured limit against the app's Limiter.

    Declare it after the identity dependency so the caller id is known.
    """

    def __init__(self, scope: str, setting: str):
        self.scope = scope
        self.setting = setting

    def limit_value(self, request: Request) -> str:
        return getattr(request.app.state.settings, self.setting)

    async def __call__(self, request: Request) -> None:
        limiter: Limiter = request.app.state.limiter
        if not limiter.enabled:
            return

        key = get_identifier(request)
        for item in parse_many(self.limit_value(request)):
            if not limiter.limiter.hit(item, self.scope, key):
                logger.info(f"Limit {item} reached for {key} on {self.scope}")
                raise RateLimitExceeded(Limit(
                    limit=item,
                    key_func=get_identifier,
                    scope=self.scope,
                    per_method=False,
                    methods=None,
                    error_message=None,
                    exempt_when=None,
                    cost=1,
                    override_defaults=False,
                ))


booking_limit = RateLimit("bookings", "RATE_LIMIT_BOOKINGS")
search_limit = RateLimit("search", "RATE_LIMIT_SEARCH")
