"""
Operaciones de turnos a nivel doctor.

Doctor.shift_time_ids es un índice derivado de shift_times: después de cada
cambio se recalcula completo y se pisa, nunca se parchea de a un id.
"""
import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import transaction
from app.core.errors import ValidationError, NotFoundError
from app.models.doctor import Doctor
from app.models.shift_time import ShiftTime
from app.services import shift_store

logger = logging.getLogger(__name__)

OPERATIONS = ("upsert", "add", "remove", "replace", "update")
DOCTOR_FIELDS = ("name", "gender", "phone_number", "email", "city", "specialization")
REQUIRED_DOCTOR_FIELDS = ("name", "gender", "phone_number", "city")


async def get_doctor_or_404(db: AsyncSession, doctor_id: str, clinic_id: str | None = None) -> Doctor:
    q = (
        select(Doctor)
        .where(Doctor.id == doctor_id, Doctor.is_active.is_(True))
        .execution_options(populate_existing=True)
    )
    d = (await db.execute(q)).scalar_one_or_none()
    if d is None or (clinic_id is not None and d.clinic_id != clinic_id):
        raise NotFoundError("Doctor no encontrado", doctor_id=doctor_id)
    return d

async def sync_doctor_shift_list(db: AsyncSession, doctor: Doctor, new_ids: Iterable[str] = ()) -> list[str]:
    """(activos que ya estaban, por fecha/horario) + (nuevos en el orden del lote), sin repetidos."""
    res = await db.execute(
        select(ShiftTime.id)
        .where(ShiftTime.doctor_id == doctor.id, ShiftTime.is_active.is_(True))
        .order_by(ShiftTime.date, ShiftTime.time_range)
    )
    active = list(res.scalars().all())
    active_set = set(active)
    fresh = [i for i in dict.fromkeys(new_ids) if i in active_set]
    fresh_set = set(fresh)

    doctor.shift_time_ids = [i for i in active if i not in fresh_set] + fresh
    return doctor.shift_time_ids

async def manage_shifts(
    db: AsyncSession,
    doctor_id: str,
    operation: str,
    payload: Any,
    clinic_id: str | None = None,
) -> list[str]:
    """
    Punto de entrada para upsert / add / remove / replace / update.

    payload es la lista de turnos (upsert, add, replace), la lista de ids
    (remove) o la lista de cambios con shift_id (update). Devuelve los ids
    afectados. Todo corre en una transacción: si falla, no queda nada escrito.
    """
    if operation not in OPERATIONS:
        raise ValidationError(f"Operación desconocida: {operation}", operation=operation)

    async with transaction(db):
        doctor = await get_doctor_or_404(db, doctor_id, clinic_id)

        if operation == "upsert":
            ids = await shift_store.upsert_shifts(db, doctor.id, doctor.clinic_id, payload)
        elif operation == "add":
            ids = await shift_store.add_shifts(db, doctor.id, doctor.clinic_id, payload)
        elif operation == "replace":
            ids = await shift_store.replace_shifts_for_dates(db, doctor.id, doctor.clinic_id, payload)
        elif operation == "update":
            ids = await shift_store.update_shifts(db, doctor.id, payload)
        else:
            ids = await shift_store.remove_shifts(db, doctor.id, payload)

        await sync_doctor_shift_list(db, doctor, new_ids=() if operation == "remove" else ids)

    logger.info("Shift %s for doctor %s touched %d shift(s)", operation, doctor_id, len(ids))
    return ids


# ---------- doctor ----------
async def update_doctor(
    db: AsyncSession,
    doctor_id: str,
    changes: dict[str, Any],
    shifts: Any = None,
    clinic_id: str | None = None,
) -> Doctor:
    """
    Actualiza los datos del doctor y, si vienen turnos, les hace upsert.
    Datos, turnos y shift_time_ids se confirman en la misma transacción.
    """
    unknown = sorted(set(changes) - set(DOCTOR_FIELDS))
    if unknown:
        raise ValidationError("Campos no editables", fields=unknown)
    cleared = [f for f in REQUIRED_DOCTOR_FIELDS if f in changes and changes[f] is None]
    if cleared:
        raise ValidationError("Campos obligatorios no pueden quedar vacíos", fields=cleared)

    async with transaction(db):
        doctor = await get_doctor_or_404(db, doctor_id, clinic_id)
        for k, v in changes.items():
            setattr(doctor, k, v)

        ids: list[str] = []
        if shifts is not None:
            ids = await shift_store.upsert_shifts(db, doctor.id, doctor.clinic_id, shifts)
        await sync_doctor_shift_list(db, doctor, new_ids=ids)

    logger.info("Updated doctor %s (%d field(s), %d shift(s))", doctor_id, len(changes), len(ids))
    return doctor

async def deactivate_doctor(db: AsyncSession, doctor_id: str, clinic_id: str | None = None) -> list[str]:
    """Baja lógica del doctor y de todos sus turnos activos. Devuelve los ids de turnos desactivados."""
    async with transaction(db):
        doctor = await get_doctor_or_404(db, doctor_id, clinic_id)
        active = [s.id for s in await shift_store.list_active_shifts(db, doctor.id)]
        removed = await shift_store.remove_shifts(db, doctor.id, active)
        doctor.shift_time_ids = []
        doctor.is_active = False

    logger.info("Deactivated doctor %s and %d shift(s)", doctor_id, len(removed))
    return removed


# ---------- lecturas ----------
async def get_doctor_shifts(db: AsyncSession, doctor_id: str, clinic_id: str | None = None) -> list[ShiftTime]:
    doctor = await get_doctor_or_404(db, doctor_id, clinic_id)
    return await shift_store.list_active_shifts(db, doctor.id)

async def get_doctor_availability(
    db: AsyncSession,
    doctor_id: str,
    date: str,
    clinic_id: str | None = None,
    available_only: bool = False,
) -> tuple[Doctor, list[ShiftTime]]:
    day = shift_store.check_date(date, 0)
    doctor = await get_doctor_or_404(db, doctor_id, clinic_id)
    shifts = await shift_store.list_shifts_for_date(db, doctor.id, day, available_only=available_only)
    return doctor, shifts
