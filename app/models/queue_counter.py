import uuid
from datetime import datetime
from sqlalchemy import String, ForeignKey, DateTime, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.core.db import Base
from app.models.clinic import utcnow

class QueueCounter(Base):
    __tablename__ = "queue_counters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    doctor_id: Mapped[str] = mapped_column(String(36), ForeignKey("doctors.id"))
    shift_time_id: Mapped[str] = mapped_column(String(36), ForeignKey("shift_times.id"))
    date: Mapped[str] = mapped_column(String(10))
    current_queue: Mapped[int] = mapped_column(Integer, default=0)
    last_reset: Mapped[datetime] = mapped_column(DateTime(timezone=False), default=utcnow)

    __table_args__ = (
        UniqueConstraint("doctor_id", "shift_time_id", "date", name="uq_queue_counter_key"),
    )
