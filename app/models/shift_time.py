import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Enum, ForeignKey, DateTime, Boolean, Integer, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.db import Base
from app.models.clinic import utcnow

class ShiftStatus(str, enum.Enum):
    Available = "Available"
    Unavailable = "Unavailable"

class ShiftTime(Base):
    __tablename__ = "shift_times"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"))

    date: Mapped[str] = mapped_column(String(10))          # "YYYY-MM-DD"
    time_range: Mapped[str] = mapped_column(String(64))    # "9.00am - 10.00am"
    shift_name: Mapped[str] = mapped_column(String(100))

    status: Mapped[ShiftStatus] = mapped_column(Enum(ShiftStatus), default=ShiftStatus.Available)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    max_appointments: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)

    doctor = relationship("Doctor")

    __table_args__ = (
        # no es unique: quedan filas históricas inactivas con la misma clave
        Index("ix_shift_doctor_date_range", "doctor_id", "date", "time_range"),
        Index("ix_shift_doctor_active", "doctor_id", "is_active"),
    )
