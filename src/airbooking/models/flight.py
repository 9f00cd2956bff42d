"""
Flight model - one scheduled departure on an aircraft
"""
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from airbooking.core.database import Base


class FlightStatus(str, PyEnum):
    """Flight status; transitions are unconstrained"""
    SCHEDULED = "scheduled"
    DELAYED = "delayed"
    CANCELLED = "cancelled"


class Flight(Base):
    __tablename__ = "flights"
    __table_args__ = (
        Index('idx_flights_search', 'departure_airport_id', 'arrival_airport_id', 'departure_time'),
    )

    id = Column(Integer, primary_key=True, index=True)
    flight_number = Column(String(20), nullable=False)
    departure_airport_id = Column(Integer, ForeignKey("airports.id", ondelete="CASCADE"), nullable=False)
    arrival_airport_id = Column(Integer, ForeignKey("airports.id", ondelete="CASCADE"), nullable=False)
    departure_time = Column(DateTime, nullable=False)
    arrival_time = Column(DateTime, nullable=False)
    aircraft_id = Column(Integer, ForeignKey("aircraft.id", ondelete="RESTRICT"), nullable=False, index=True)
    base_price = Column(Numeric(10, 2), nullable=False)
    status = Column(
        Enum(
            FlightStatus,
            name="flight_status",
            native_enum=False,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=FlightStatus.SCHEDULED,
        index=True,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    aircraft = relationship("Aircraft", back_populates="flights")
    departure_airport = relationship("Airport", foreign_keys=[departure_airport_id])
    arrival_airport = relationship("Airport", foreign_keys=[arrival_airport_id])
    flight_seats = relationship("FlightSeat", back_populates="flight", cascade="all, delete-orphan")

    def __repr__(self):
        return (f"<Flight(id={self.id}, number='{self.flight_number}', "
                f"aircraft_id={self.aircraft_id}, departs='{self.departure_time}')>")
