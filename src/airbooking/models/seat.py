"""
Seat model - one physical seat in an aircraft's seat catalog
"""
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship

from airbooking.core.database import Base


class CabinClass(str, PyEnum):
    """Cabin classes; partitions seats and pricing"""
    ECONOMY = "economy"
    BUSINESS = "business"
    FIRST = "first"

    @classmethod
    def parse(cls, value) -> "CabinClass":
        """Normalise caller input; blank means economy. Raises ValueError."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        if not normalized:
            return cls.ECONOMY
        return cls(normalized)


def cabin_class_type(name: str) -> Enum:
    """String-backed enum column storing the lowercase values"""
    return Enum(
        CabinClass,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda enum: [member.value for member in enum],
    )


class Seat(Base):
    __tablename__ = "seats"
    __table_args__ = (
        UniqueConstraint('aircraft_id', 'seat_number', name='uq_seat_aircraft_number'),
    )

    id = Column(Integer, primary_key=True, index=True)
    aircraft_id = Column(Integer, ForeignKey("aircraft.id", ondelete="RESTRICT"), nullable=False, index=True)
    seat_number = Column(String(5), nullable=False)  # '12A'
    cabin_class = Column(
        "class",
        cabin_class_type("seat_class"),
        nullable=False,
        default=CabinClass.ECONOMY,
        index=True,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    aircraft = relationship("Aircraft", back_populates="seats")
    flight_seats = relationship("FlightSeat", back_populates="seat")

    def __repr__(self):
        return (f"<Seat(id={self.id}, aircraft_id={self.aircraft_id}, "
                f"seat_number='{self.seat_number}', class='{self.cabin_class.value}')>")
