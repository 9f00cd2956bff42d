"""
Booking reference generation tests
"""
from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from airbooking.models import Booking, BookingStatus
from airbooking.services import PNR_ALPHABET, ReferenceExhaustedError, ReferenceGenerator


def scripted(*references):
    """A choice() that spells out the given references one symbol at a time"""
    symbols = iter("".join(references))
    return lambda alphabet: next(symbols)


async def insert_booking(database, reference):
    async with database.session() as db:
        async with db.begin():
            db.add(Booking(
                user_id=1,
                booking_reference=reference,
                status=BookingStatus.PENDING,
                total_amount=Decimal("10.00"),
            ))


class TestReferenceGenerator:

    def test_alphabet_excludes_ambiguous_symbols(self):
        """Test I, O, 0 and 1 never appear"""
        assert len(PNR_ALPHABET) == 32
        assert not set("IO01") & set(PNR_ALPHABET)

    def test_draw_format(self):
        """Test draws are six symbols from the alphabet"""
        generator = ReferenceGenerator()
        for _ in range(200):
            reference = generator.draw()
            assert len(reference) == 6
            assert ReferenceGenerator.is_valid(reference)

    @pytest.mark.asyncio
    async def test_redraws_on_collision(self, database):
        """Test a taken reference is skipped"""
        await insert_booking(database, "AAAAAA")
        generator = ReferenceGenerator(choice=scripted("AAAAAA", "BBBBBB"))

        async with database.session() as db:
            assert await generator.generate(db) == "BBBBBB"

    @pytest.mark.asyncio
    async def test_exhaustion(self, database):
        """Test the loop gives up after max_attempts collisions"""
        await insert_booking(database, "AAAAAA")
        generator = ReferenceGenerator(max_attempts=5, choice=lambda alphabet: "A")

        async with database.session() as db:
            with pytest.raises(ReferenceExhaustedError):
                await generator.generate(db)

    @pytest.mark.asyncio
    async def test_references_are_unique(self, database):
        """Test the unique constraint backs the pre-check"""
        await insert_booking(database, "ZZZZZZ")

        with pytest.raises(IntegrityError):
            await insert_booking(database, "ZZZZZZ")

        async with database.session() as db:
            result = await db.execute(select(Booking).where(Booking.booking_reference == "ZZZZZZ"))
            assert len(result.scalars().all()) == 1
