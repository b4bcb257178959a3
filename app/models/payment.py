import uuid
import enum
from datetime import datetime
from sqlalchemy import String, Enum, ForeignKey, DateTime, Float
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.db import Base
from app.models.clinic import utcnow

class PaymentMethod(str, enum.Enum):
    Cash = "Cash"
    Card = "Card"
    Online = "Online"

class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    appointment_id: Mapped[str] = mapped_column(String(36), ForeignKey("appointments.id"), unique=True)
    clinic_id: Mapped[str] = mapped_column(String(36), ForeignKey("clinics.id"), index=True)
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"), index=True)

    patient_name: Mapped[str] = mapped_column(String(255))
    patient_contact: Mapped[str] = mapped_column(String(50))

    consultation_fee: Mapped[float] = mapped_column(Float)
    medication_fee: Mapped[float] = mapped_column(Float)
    total_amount: Mapped[float] = mapped_column(Float)
    payment_method: Mapped[PaymentMethod] = mapped_column(Enum(PaymentMethod), default=PaymentMethod.Cash)

    reference_number: Mapped[str] = mapped_column(String(64), unique=True)
    paid_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)

    appointment = relationship("Appointment")
