"""Doctor model definitions."""

from sqlalchemy import Boolean, Column, Integer, String
from backend.database import Base


class Doctor(Base):
    """Represents a doctor working for one tenant clinic."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, nullable=False)
    full_name = Column(String)
    is_active = Column(Boolean, default=True)
