"""
Alta de turnos (appointments) con número de cola.

book_appointment es el único camino para crear un Appointment: valida doctor y
horario, reserva el número en QueueCounter e inserta el turno, todo en una sola
transacción. Si algo falla no queda ni turno ni incremento del contador.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import transaction
from app.core.errors import (
    ValidationError,
    NotFoundError,
    SlotUnavailableError,
    ConflictError,
    InvalidTransitionError,
)
from app.models.appointment import Appointment, ApptStatus
from app.models.doctor import Doctor, GenderEnum
from app.models.shift_time import ShiftStatus
from app.services import references
from app.services.queue_counter import reserve_next
from app.services.shift_store import check_date, get_shift

logger = logging.getLogger(__name__)

# Pending -> Confirm -> Completed | Cancelled ; Completed y Cancelled son finales
TRANSITIONS: dict[ApptStatus, frozenset[ApptStatus]] = {
    ApptStatus.Pending: frozenset({ApptStatus.Confirm, ApptStatus.Cancelled}),
    ApptStatus.Confirm: frozenset({ApptStatus.Completed, ApptStatus.Cancelled}),
    ApptStatus.Completed: frozenset(),
    ApptStatus.Cancelled: frozenset(),
}

PATIENT_FIELDS = ("patient_name", "patient_gender", "patient_age", "patient_contact")


@dataclass(frozen=True)
class BookingResult:
    appointment_id: str
    queue_number: int
    reference_number: str
    status: ApptStatus
    appointment: Appointment


def check_transition(current: ApptStatus, new: ApptStatus) -> None:
    if new not in TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"No se puede pasar un turno de {current.value} a {new.value}",
            current=current.value,
            requested=new.value,
        )

def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())

def _validate_booking(patient: Mapping[str, Any], appointment_date: Any, appointment_time: Any) -> dict[str, Any]:
    missing = [f for f in PATIENT_FIELDS if _blank(patient.get(f))]
    if _blank(appointment_date):
        missing.append("appointment_date")
    if _blank(appointment_time):
        missing.append("appointment_time")
    if missing:
        raise ValidationError("Todos los campos son obligatorios", missing=missing)

    try:
        gender = GenderEnum(patient["patient_gender"])
    except ValueError:
        raise ValidationError("patient_gender debe ser Male o Female", field="patient_gender")

    age = patient["patient_age"]
    if isinstance(age, bool) or not isinstance(age, int) or age < 0:
        raise ValidationError("patient_age debe ser un entero >= 0", field="patient_age")

    try:
        day = check_date(appointment_date, 0)
    except ValidationError:
        raise ValidationError("appointment_date debe tener formato YYYY-MM-DD", field="appointment_date")

    return {
        "patient_name": str(patient["patient_name"]).strip(),
        "patient_gender": gender,
        "patient_age": age,
        "patient_contact": str(patient["patient_contact"]).strip(),
        "appointment_date": day,
        "appointment_time": str(appointment_time).strip(),
    }


# ---------- create ----------
async def book_appointment(
    db: AsyncSession,
    *,
    doctor_id: str,
    shift_time_id: str,
    patient: Mapping[str, Any],
    appointment_date: str,
    appointment_time: str,
    clinic_id: str | None = None,
) -> BookingResult:
    fields = _validate_booking(patient, appointment_date, appointment_time)
    day = fields["appointment_date"]

    async with transaction(db):
        doctor = (await db.execute(
            select(Doctor).where(Doctor.id == doctor_id).execution_options(populate_existing=True)
        )).scalar_one_or_none()
        if doctor is None or not doctor.is_active or (clinic_id is not None and doctor.clinic_id != clinic_id):
            raise NotFoundError("Doctor no encontrado", doctor_id=doctor_id)

        shift = await get_shift(db, shift_time_id)
        if shift is None or shift.doctor_id != doctor_id:
            raise NotFoundError("Horario no encontrado", shift_time_id=shift_time_id)
        if shift.status != ShiftStatus.Available or not shift.is_active:
            raise SlotUnavailableError("El horario seleccionado no está disponible", shift_time_id=shift_time_id)

        queue_number = await reserve_next(db, doctor_id, shift_time_id, day)

        ap = Appointment(
            clinic_id=doctor.clinic_id,
            doctor_id=doctor_id,
            shift_time_id=shift_time_id,
            queue_number=queue_number,
            reference_number=references.appointment_reference(),
            status=ApptStatus.Confirm,
            is_read=False,
            **fields,
        )
        db.add(ap)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ConflictError(
                "Número de referencia duplicado, reintentar la reserva",
                reference_number=ap.reference_number,
            ) from exc

        # tope de capacidad "best effort": el contador manda, esto solo corta las próximas reservas
        if shift.max_appointments and queue_number >= shift.max_appointments:
            shift.status = ShiftStatus.Unavailable
            logger.info("Shift %s reached capacity (%d), marked Unavailable", shift.id, shift.max_appointments)

    logger.info(
        "Booked appointment %s (ref %s) queue #%d for doctor %s on %s",
        ap.id, ap.reference_number, queue_number, doctor_id, day,
    )
    return BookingResult(
        appointment_id=ap.id,
        queue_number=ap.queue_number,
        reference_number=ap.reference_number,
        status=ap.status,
        appointment=ap,
    )


# ---------- read ----------
async def get_appointment(db: AsyncSession, appointment_id: str, clinic_id: str | None = None) -> Appointment:
    ap = (await db.execute(
        select(Appointment).where(Appointment.id == appointment_id).execution_options(populate_existing=True)
    )).scalar_one_or_none()
    if ap is None or (clinic_id is not None and ap.clinic_id != clinic_id):
        raise NotFoundError("Turno no encontrado", appointment_id=appointment_id)
    return ap

async def get_by_reference(db: AsyncSession, reference_number: str) -> Appointment:
    ap = (await db.execute(
        select(Appointment).where(Appointment.reference_number == reference_number)
    )).scalar_one_or_none()
    if ap is None:
        raise NotFoundError("Turno no encontrado", reference_number=reference_number)
    return ap

async def list_appointments(
    db: AsyncSession,
    clinic_id: str,
    *,
    doctor_id: str | None = None,
    date: str | None = None,
    status: ApptStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Appointment]:
    q = select(Appointment).where(Appointment.clinic_id == clinic_id)
    if doctor_id:
        q = q.where(Appointment.doctor_id == doctor_id)
    if date:
        q = q.where(Appointment.appointment_date == date)
    if status:
        q = q.where(Appointment.status == status)
    q = q.order_by(Appointment.appointment_date, Appointment.queue_number).offset(offset).limit(limit)
    return list((await db.execute(q)).scalars().all())


# ---------- update ----------
async def update_status(
    db: AsyncSession, appointment_id: str, new_status: ApptStatus, clinic_id: str | None = None
) -> Appointment:
    if new_status == ApptStatus.Completed:
        # Completed solo se alcanza registrando el pago (app.services.payments)
        raise InvalidTransitionError(
            "Un turno pasa a Completed al registrar el pago",
            requested=new_status.value,
        )
    async with transaction(db):
        ap = await get_appointment(db, appointment_id, clinic_id)
        check_transition(ap.status, new_status)
        ap.status = new_status
    logger.info("Appointment %s -> %s", appointment_id, new_status.value)
    return ap

async def mark_read(db: AsyncSession, appointment_id: str, clinic_id: str | None = None) -> Appointment:
    async with transaction(db):
        ap = await get_appointment(db, appointment_id, clinic_id)
        ap.is_read = True
    return ap
