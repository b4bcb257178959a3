from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_clinic
from app.core.db import get_db
from app.models.clinic import Clinic
from app.models.doctor import Doctor
from app.schemas.doctor import DoctorCreate, DoctorUpdate, DoctorOut
from app.schemas.shift_time import (
    ShiftBatch,
    ShiftRemove,
    ShiftUpdates,
    ShiftOut,
    ShiftOperationOut,
    DoctorAvailabilityOut,
)
from app.services import doctor_shifts

router = APIRouter(prefix="/clinics/{clinic_id}/doctors", tags=["doctors"])

async def _run_shift_operation(
    clinic: Clinic, doctor_id: str, operation: str, payload: list, db: AsyncSession
) -> ShiftOperationOut:
    ids = await doctor_shifts.manage_shifts(db, doctor_id, operation, payload, clinic_id=clinic.id)
    doctor = await doctor_shifts.get_doctor_or_404(db, doctor_id, clinic.id)
    return ShiftOperationOut(operation=operation, shift_ids=ids, doctor_shift_ids=doctor.shift_time_ids)

# ---------- create ----------
@router.post("/", response_model=DoctorOut, status_code=201)
async def create_doctor(
    payload: DoctorCreate,
    clinic: Clinic = Depends(require_clinic),
    db: AsyncSession = Depends(get_db),
):
    # alta sin turnos; los turnos se cargan por /shifts
    d = Doctor(clinic_id=clinic.id, shift_time_ids=[], **payload.model_dump())
    db.add(d)
    await db.commit()
    await db.refresh(d)
    return d

# ---------- list ----------
@router.get("/", response_model=list[DoctorOut])
async def list_doctors(
    clinic: Clinic = Depends(require_clinic),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    q = select(Doctor).where(Doctor.clinic_id == clinic.id, Doctor.is_active.is_(True)).order_by(Doctor.name)
    res = await db.execute(q.offset(offset).limit(limit))
    return res.scalars().all()

# ---------- read ----------
@router.get("/{doctor_id}", response_model=DoctorOut)
async def get_doctor(doctor_id: str, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)):
    return await doctor_shifts.get_doctor_or_404(db, doctor_id, clinic.id)

@router.get("/{doctor_id}/shifts", response_model=list[ShiftOut])
async def get_doctor_shifts(doctor_id: str, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)):
    return await doctor_shifts.get_doctor_shifts(db, doctor_id, clinic.id)

@router.get("/{doctor_id}/availability", response_model=DoctorAvailabilityOut)
async def get_doctor_availability(
    doctor_id: str,
    date: str = Query(..., description="YYYY-MM-DD"),
    clinic: Clinic = Depends(require_clinic),
    db: AsyncSession = Depends(get_db),
):
    doctor, shifts = await doctor_shifts.get_doctor_availability(db, doctor_id, date, clinic.id)
    return DoctorAvailabilityOut(
        doctor_id=doctor.id,
        doctor_name=doctor.name,
        date=date,
        shifts=[ShiftOut.model_validate(s) for s in shifts],
    )

# ---------- update ----------
@router.patch("/{doctor_id}", response_model=DoctorOut)
async def update_doctor(
    doctor_id: str, patch: DoctorUpdate, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    changes = patch.model_dump(exclude_unset=True, exclude={"shift_times"})
    shifts = None if patch.shift_times is None else [s.model_dump() for s in patch.shift_times]
    return await doctor_shifts.update_doctor(db, doctor_id, changes, shifts, clinic_id=clinic.id)

# ---------- delete ----------
@router.delete("/{doctor_id}", status_code=204)
async def delete_doctor(doctor_id: str, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)):
    # baja lógica: los turnos quedan inactivos, nunca se borran
    await doctor_shifts.deactivate_doctor(db, doctor_id, clinic.id)
    return

# ---------- turnos ----------
@router.put("/{doctor_id}/shifts", response_model=ShiftOperationOut)
async def upsert_shifts(
    doctor_id: str, payload: ShiftBatch, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    shifts = [s.model_dump() for s in payload.shifts]
    return await _run_shift_operation(clinic, doctor_id, "upsert", shifts, db)

@router.post("/{doctor_id}/shifts", response_model=ShiftOperationOut, status_code=201)
async def add_shifts(
    doctor_id: str, payload: ShiftBatch, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    shifts = [s.model_dump() for s in payload.shifts]
    return await _run_shift_operation(clinic, doctor_id, "add", shifts, db)

@router.post("/{doctor_id}/shifts/replace", response_model=ShiftOperationOut)
async def replace_shifts(
    doctor_id: str, payload: ShiftBatch, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    shifts = [s.model_dump() for s in payload.shifts]
    return await _run_shift_operation(clinic, doctor_id, "replace", shifts, db)

@router.patch("/{doctor_id}/shifts", response_model=ShiftOperationOut)
async def update_shifts(
    doctor_id: str, payload: ShiftUpdates, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    updates = [u.model_dump(exclude_unset=True) for u in payload.updates]
    return await _run_shift_operation(clinic, doctor_id, "update", updates, db)

@router.post("/{doctor_id}/shifts/remove", response_model=ShiftOperationOut)
async def remove_shifts(
    doctor_id: str, payload: ShiftRemove, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    return await _run_shift_operation(clinic, doctor_id, "remove", payload.shift_ids, db)
