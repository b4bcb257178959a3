"""
Persistencia validada de los turnos (ShiftTime) de cada doctor.

Las funciones corren dentro de la transacción del que llama
(ver app.services.doctor_shifts); ninguna hace commit.
"""
import logging
import re
import uuid
from collections.abc import Iterable, Mapping, Sequence
from datetime import date as date_cls
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ValidationError, NotFoundError, DuplicateShiftError
from app.models.shift_time import ShiftTime, ShiftStatus

logger = logging.getLogger(__name__)

TIME_RANGE_RE = re.compile(
    r"^(\d{1,2})\.(\d{2})(am|pm)\s*-\s*(\d{1,2})\.(\d{2})(am|pm)$", re.IGNORECASE
)
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


# ---------- validación ----------
def normalize_time_range(value: Any, index: int) -> str:
    """'9.00AM-10.00am ' -> '9.00am - 10.00am'"""
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"El turno en la posición {index} debe tener time_range", index=index)
    m = TIME_RANGE_RE.match(text)
    if not m:
        raise ValidationError(
            f"Formato de time_range inválido en la posición {index}. Usar por ejemplo \"9.00am - 5.00pm\"",
            index=index,
        )
    h1, m1, p1, h2, m2, p2 = m.groups()
    return f"{int(h1)}.{m1}{p1.lower()} - {int(h2)}.{m2}{p2.lower()}"

def check_date(value: Any, index: int) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"El turno en la posición {index} debe tener date", index=index)
    try:
        if not DATE_RE.match(text):
            raise ValueError(text)
        date_cls.fromisoformat(text)
    except ValueError:
        raise ValidationError(
            f"Formato de fecha inválido en la posición {index}. Usar YYYY-MM-DD", index=index
        )
    return text

def check_status(value: Any, index: int) -> ShiftStatus:
    try:
        return ShiftStatus(value)
    except ValueError:
        raise ValidationError(
            f"Estado inválido en la posición {index}: {value!r} (Available | Unavailable)", index=index
        )

def check_capacity(value: Any, index: int) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"max_appointments debe ser un entero >= 1 (posición {index})", index=index)
    return value

def validate_shift(shift: Mapping[str, Any], index: int) -> dict[str, Any]:
    status = shift.get("status")
    return {
        "date": check_date(shift.get("date"), index),
        "time_range": normalize_time_range(shift.get("time_range"), index),
        "shift_name": (shift.get("shift_name") or "").strip() or f"Shift {index + 1}",
        "status": check_status(status, index) if status is not None else ShiftStatus.Available,
        "is_active": shift.get("is_active") is not False,
        "max_appointments": check_capacity(shift.get("max_appointments"), index),
    }

def validate_shifts(shifts: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    if shifts is None or isinstance(shifts, (str, bytes)) or not isinstance(shifts, Sequence):
        raise ValidationError("Los turnos deben enviarse como lista")
    validated = []
    for i, s in enumerate(shifts):
        if not isinstance(s, Mapping):
            raise ValidationError(f"El turno en la posición {i} debe ser un objeto", index=i)
        validated.append(validate_shift(s, i))
    return validated


# ---------- consultas ----------
async def get_shift(db: AsyncSession, shift_id: str) -> ShiftTime | None:
    q = select(ShiftTime).where(ShiftTime.id == shift_id).execution_options(populate_existing=True)
    return (await db.execute(q)).scalar_one_or_none()

async def list_active_shifts(db: AsyncSession, doctor_id: str) -> list[ShiftTime]:
    q = (
        select(ShiftTime)
        .where(ShiftTime.doctor_id == doctor_id, ShiftTime.is_active.is_(True))
        .order_by(ShiftTime.date, ShiftTime.time_range)
    )
    return list((await db.execute(q)).scalars().all())

async def list_shifts_for_date(
    db: AsyncSession, doctor_id: str, date: str, available_only: bool = False
) -> list[ShiftTime]:
    q = select(ShiftTime).where(
        ShiftTime.doctor_id == doctor_id,
        ShiftTime.date == date,
        ShiftTime.is_active.is_(True),
    )
    if available_only:
        q = q.where(ShiftTime.status == ShiftStatus.Available)
    res = await db.execute(q.order_by(ShiftTime.time_range))
    return list(res.scalars().all())

async def _find_by_key(db: AsyncSession, doctor_id: str, date: str, time_range: str) -> ShiftTime | None:
    # puede haber varias filas históricas: preferimos la activa, después la más reciente
    q = (
        select(ShiftTime)
        .where(
            ShiftTime.doctor_id == doctor_id,
            ShiftTime.date == date,
            ShiftTime.time_range == time_range,
        )
        .order_by(ShiftTime.is_active.desc(), ShiftTime.updated_at.desc(), ShiftTime.created_at.desc())
        .limit(1)
    )
    return (await db.execute(q)).scalars().first()


# ---------- escrituras ----------
async def deactivate_for_dates(db: AsyncSession, doctor_id: str, dates: Iterable[str]) -> int:
    dates = sorted(set(dates))
    if not dates:
        return 0
    res = await db.execute(
        update(ShiftTime)
        .where(
            ShiftTime.doctor_id == doctor_id,
            ShiftTime.date.in_(dates),
            ShiftTime.is_active.is_(True),
        )
        .values(is_active=False)
    )
    return res.rowcount or 0

async def upsert_shifts(
    db: AsyncSession, doctor_id: str, clinic_id: str, shifts: Sequence[Mapping[str, Any]]
) -> list[str]:
    validated = validate_shifts(shifts)
    await deactivate_for_dates(db, doctor_id, (s["date"] for s in validated))

    ids: list[str] = []
    for shift in validated:
        row = await _find_by_key(db, doctor_id, shift["date"], shift["time_range"])
        if row is None:
            row = ShiftTime(id=str(uuid.uuid4()), doctor_id=doctor_id, clinic_id=clinic_id, **shift)
            db.add(row)
        else:
            row.clinic_id = clinic_id
            for k, v in shift.items():
                setattr(row, k, v)
        await db.flush()
        if row.id not in ids:
            ids.append(row.id)

    logger.debug("Upserted %d shift(s) for doctor %s", len(ids), doctor_id)
    return ids

async def add_shifts(
    db: AsyncSession, doctor_id: str, clinic_id: str, shifts: Sequence[Mapping[str, Any]]
) -> list[str]:
    validated = validate_shifts(shifts)
    dates = {s["date"] for s in validated}

    res = await db.execute(
        select(ShiftTime.date, ShiftTime.time_range).where(
            ShiftTime.doctor_id == doctor_id,
            ShiftTime.date.in_(dates),
            ShiftTime.is_active.is_(True),
        )
    )
    taken = {(d, tr) for d, tr in res.all()}

    rows = []
    for index, shift in enumerate(validated):
        key = (shift["date"], shift["time_range"])
        if key in taken:
            raise DuplicateShiftError(
                f"Turno duplicado para {shift['date']} con horario {shift['time_range']}",
                index=index,
                date=shift["date"],
                time_range=shift["time_range"],
            )
        taken.add(key)
        rows.append(ShiftTime(
            id=str(uuid.uuid4()),
            doctor_id=doctor_id,
            clinic_id=clinic_id,
            **{**shift, "is_active": True},
        ))

    db.add_all(rows)
    await db.flush()
    return [r.id for r in rows]

async def remove_shifts(db: AsyncSession, doctor_id: str, shift_ids: Sequence[str]) -> list[str]:
    if shift_ids is None or isinstance(shift_ids, (str, bytes)) or not isinstance(shift_ids, Sequence):
        raise ValidationError("shift_ids debe ser una lista")
    if not shift_ids:
        return []

    # el filtro por doctor evita tocar turnos de otro doctor/clínica con el mismo id
    res = await db.execute(
        select(ShiftTime.id).where(
            ShiftTime.id.in_(list(shift_ids)),
            ShiftTime.doctor_id == doctor_id,
            ShiftTime.is_active.is_(True),
        )
    )
    found = set(res.scalars().all())
    if found:
        await db.execute(
            update(ShiftTime)
            .where(ShiftTime.id.in_(list(found)), ShiftTime.doctor_id == doctor_id)
            .values(is_active=False)
        )
    return [i for i in dict.fromkeys(shift_ids) if i in found]

async def replace_shifts_for_dates(
    db: AsyncSession, doctor_id: str, clinic_id: str, shifts: Sequence[Mapping[str, Any]]
) -> list[str]:
    """
    Reemplaza todos los turnos activos en las fechas del lote por el lote.
    upsert_shifts ya desactiva esas fechas antes de escribir, así que es la misma operación.
    """
    return await upsert_shifts(db, doctor_id, clinic_id, shifts)

async def update_shifts(
    db: AsyncSession, doctor_id: str, updates: Sequence[Mapping[str, Any]]
) -> list[str]:
    if updates is None or isinstance(updates, (str, bytes)) or not isinstance(updates, Sequence):
        raise ValidationError("updates debe ser una lista")

    ids: list[str] = []
    for index, upd in enumerate(updates):
        if not isinstance(upd, Mapping):
            raise ValidationError(f"La actualización en la posición {index} debe ser un objeto", index=index)
        shift_id = upd.get("shift_id")
        if not shift_id:
            raise ValidationError("Cada actualización debe incluir shift_id", index=index)

        row = (await db.execute(
            select(ShiftTime).where(ShiftTime.id == shift_id, ShiftTime.doctor_id == doctor_id)
        )).scalar_one_or_none()
        if row is None:
            raise NotFoundError(f"Turno {shift_id} no encontrado para este doctor", shift_id=shift_id)

        changes: dict[str, Any] = {}
        if upd.get("time_range") is not None:
            changes["time_range"] = normalize_time_range(upd["time_range"], index)
        if upd.get("date") is not None:
            changes["date"] = check_date(upd["date"], index)
        if upd.get("shift_name"):
            changes["shift_name"] = upd["shift_name"].strip()
        if upd.get("status") is not None:
            changes["status"] = check_status(upd["status"], index)
        if isinstance(upd.get("is_active"), bool):
            changes["is_active"] = upd["is_active"]
        if "max_appointments" in upd:
            changes["max_appointments"] = check_capacity(upd["max_appointments"], index)

        for k, v in changes.items():
            setattr(row, k, v)
        await db.flush()

        if row.is_active:
            clash = (await db.execute(
                select(ShiftTime.id).where(
                    ShiftTime.doctor_id == doctor_id,
                    ShiftTime.date == row.date,
                    ShiftTime.time_range == row.time_range,
                    ShiftTime.is_active.is_(True),
                    ShiftTime.id != row.id,
                )
            )).scalars().first()
            if clash:
                raise DuplicateShiftError(
                    f"Ya existe un turno activo para {row.date} con horario {row.time_range}",
                    index=index,
                    date=row.date,
                    time_range=row.time_range,
                )
        if row.id not in ids:
            ids.append(row.id)
    return ids
