"""
FlightSeat model - the unit of inventory: one seat on one flight.

Cabin availability is never stored; it is aggregated from these rows on read.
"""
from sqlalchemy import Boolean, Column, Integer, DateTime, ForeignKey, UniqueConstraint, Index, func
from sqlalchemy.orm import relationship

from airbooking.core.database import Base


class FlightSeat(Base):
    __tablename__ = "flight_seats"
    __table_args__ = (
        UniqueConstraint('flight_id', 'seat_id', name='uq_flight_seat'),
        Index('idx_flight_seats_available', 'flight_id', 'is_occupied'),
    )

    id = Column(Integer, primary_key=True, index=True)
    flight_id = Column(Integer, ForeignKey("flights.id", ondelete="CASCADE"), nullable=False, index=True)
    seat_id = Column(Integer, ForeignKey("seats.id", ondelete="RESTRICT"), nullable=False)
    is_occupied = Column(Boolean, nullable=False, default=False)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    # Server-side defaults: rows are bulk inserted with INSERT ... SELECT
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    flight = relationship("Flight", back_populates="flight_seats")
    seat = relationship("Seat", back_populates="flight_seats")

    def __repr__(self):
        return (f"<FlightSeat(flight_id={self.flight_id}, seat_id={self.seat_id}, "
                f"occupied={self.is_occupied})>")
