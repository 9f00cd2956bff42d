"""
Booking reference (PNR) generation

Six symbols from an alphabet without I, O, 0 or 1. Uniqueness is checked
inside the caller's transaction and backed by the unique constraint on
bookings.booking_reference.
"""
import logging
import secrets
from typing import Callable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from airbooking.core.metrics import pnr_collisions_total
from airbooking.models import Booking
from airbooking.services.errors import ResourceExhaustedError

logger = logging.getLogger(__name__)

PNR_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
PNR_LENGTH = 6
DEFAULT_MAX_ATTEMPTS = 100


class ReferenceExhaustedError(ResourceExhaustedError):
    """Raised when no unused booking reference could be drawn"""
    pass


class ReferenceGenerator:
    """Draws references and checks them against existing bookings"""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        choice: Optional[Callable[[Sequence[str]], str]] = None,
    ):
        self.max_attempts = max_attempts
        self._choice = choice or secrets.choice

    def draw(self) -> str:
        return "".join(self._choice(PNR_ALPHABET) for _ in range(PNR_LENGTH))

    @staticmethod
    def is_valid(reference: str) -> bool:
        return len(reference) == PNR_LENGTH and all(ch in PNR_ALPHABET for ch in reference)

    async def is_taken(self, db: AsyncSession, reference: str) -> bool:
        found = await db.scalar(
            select(Booking.id).where(Booking.booking_reference == reference).limit(1)
        )
        return found is not None

    async def generate(self, db: AsyncSession) -> str:
        """
        Draw until an unused reference comes up.

        Must run inside the transaction that inserts the booking.

        Raises:
            ReferenceExhaustedError: after max_attempts collisions
        """
        for attempt in range(1, self.max_attempts + 1):
            reference = self.draw()
            if not await self.is_taken(db, reference):
                return reference

            pnr_collisions_total.inc()
            logger.warning(f"Booking reference collision on attempt {attempt}")

        raise ReferenceExhaustedError(
            f"Failed to generate a unique booking reference after {self.max_attempts} attempts"
        )
