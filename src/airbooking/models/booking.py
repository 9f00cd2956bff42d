"""
Booking models - header, flight segment and passenger manifest.

All three are written in one transaction by the booking engine.
"""
from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import Column, Date, Integer, String, DateTime, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship

from airbooking.core.database import Base
from airbooking.models.seat import cabin_class_type


class BookingStatus(str, PyEnum):
    """Enum for booking status"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    # Caller identity from the identity provider; users live outside this service
    user_id = Column(Integer, nullable=False, index=True)
    booking_reference = Column(String(10), unique=True, nullable=False)  # PNR
    status = Column(
        Enum(
            BookingStatus,
            name="booking_status",
            native_enum=False,
            length=20,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    total_amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    segments = relationship("BookingFlight", back_populates="booking", cascade="all, delete-orphan")
    passengers = relationship(
        "BookingPassenger",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingPassenger.id",
    )

    def __repr__(self):
        return (f"<Booking(id={self.id}, ref='{self.booking_reference}', user_id={self.user_id}, "
                f"status='{self.status.value}', total=${self.total_amount})>")


class BookingFlight(Base):
    """One flight leg of a booking; price is the flight's base price at booking time"""
    __tablename__ = "booking_flights"

    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), primary_key=True)
    flight_id = Column(Integer, ForeignKey("flights.id", ondelete="RESTRICT"), primary_key=True)
    cabin_class = Column(cabin_class_type("booking_cabin_class"), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # Relationships
    booking = relationship("Booking", back_populates="segments")
    flight = relationship("Flight")

    def __repr__(self):
        return (f"<BookingFlight(booking_id={self.booking_id}, flight_id={self.flight_id}, "
                f"cabin='{self.cabin_class.value}', price=${self.price})>")


class BookingPassenger(Base):
    __tablename__ = "booking_passengers"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    date_of_birth = Column(Date, nullable=True)
    passport_number = Column(String(50), nullable=True)

    # Relationships
    booking = relationship("Booking", back_populates="passengers")

    def __repr__(self):
        return f"<BookingPassenger(id={self.id}, booking_id={self.booking_id}, name='{self.full_name}')>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
