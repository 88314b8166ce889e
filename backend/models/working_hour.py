"""Working-hour template model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, SmallInteger, Time, func
from backend.database import Base
from backend.scheduling.domain import DEFAULT_SLOT_DURATION_MINUTES


class DoctorWorkingHour(Base):
    """Represents a recurring weekly working window for one doctor."""
    __tablename__ = "doctor_working_hours"

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id"), nullable=False)
    day_of_week = Column(SmallInteger, nullable=False)  # 1=Monday, 7=Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_duration_minutes = Column(Integer, nullable=False, default=DEFAULT_SLOT_DURATION_MINUTES)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
