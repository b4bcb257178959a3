import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Enum, ForeignKey, DateTime, Integer, Boolean, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.models.clinic import utcnow
from app.models.doctor import GenderEnum

class ApptStatus(str, enum.Enum):
    Pending = "Pending"
    Confirm = "Confirm"
    Completed = "Completed"
    Cancelled = "Cancelled"

class Appointment(Base):
    __tablename__ = "appointments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"))
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"), index=True)
    shift_time_id: Mapped[str] = mapped_column(String(36), ForeignKey("shift_times.id"), index=True)

    patient_name: Mapped[str] = mapped_column(String(255))
    patient_gender: Mapped[GenderEnum] = mapped_column(Enum(GenderEnum))
    patient_age: Mapped[int] = mapped_column(Integer)
    patient_contact: Mapped[str] = mapped_column(String(50))

    appointment_date: Mapped[str] = mapped_column(String(10))   # "YYYY-MM-DD"
    appointment_time: Mapped[str] = mapped_column(String(64))

    # se fijan al crear y no se tocan más
    queue_number: Mapped[int] = mapped_column(Integer)
    reference_number: Mapped[str] = mapped_column(String(64), unique=True)

    status: Mapped[ApptStatus] = mapped_column(Enum(ApptStatus), default=ApptStatus.Pending, index=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)

    booking_date: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)

    doctor = relationship("Doctor")
    shift_time = relationship("ShiftTime")

    __table_args__ = (
        Index("ix_appt_clinic_date", "clinic_id", "appointment_date"),
    )
