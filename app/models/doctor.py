import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Enum, ForeignKey, DateTime, JSON, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.db import Base
from app.models.clinic import utcnow

class GenderEnum(str, enum.Enum):
    Male = "Male"
    Female = "Female"

class Doctor(Base):
    __tablename__ = "doctors"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)

    name: Mapped[str] = mapped_column(String(255))
    gender: Mapped[GenderEnum] = mapped_column(Enum(GenderEnum))
    phone_number: Mapped[str] = mapped_column(String(50))
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(255))
    specialization: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # índice derivado: ids de ShiftTime activos, se recalcula en cada cambio de turnos
    shift_time_ids: Mapped[list[str]] = mapped_column(JSON, default=list)
    # baja lógica: tiene turnos y citas históricas que lo referencian
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow, onupdate=utcnow)

    clinic = relationship("Clinic", back_populates="doctors")
