"""
Aircraft model - a physical airframe type and its seat catalog
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from airbooking.core.database import Base


class Aircraft(Base):
    __tablename__ = "aircraft"

    id = Column(Integer, primary_key=True, index=True)
    model = Column(String(100), nullable=False, index=True)
    # Informational only; the real seat count is the number of Seat rows
    total_seats = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    seats = relationship("Seat", back_populates="aircraft")
    flights = relationship("Flight", back_populates="aircraft")

    def __repr__(self):
        return f"<Aircraft(id={self.id}, model='{self.model}', total_seats={self.total_seats})>"
