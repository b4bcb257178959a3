from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_clinic
from app.core.db import get_db
from app.models.appointment import ApptStatus
from app.models.clinic import Clinic
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentOut,
    AppointmentStatusUpdate,
    BookingOut,
    CounterOut,
)
from app.schemas.payment import PaymentCreate, PaymentOut
from app.schemas.shift_time import ShiftOut
from app.services import doctor_shifts, payments, scheduler
from app.services.queue_counter import get_counter_value
from app.services.shift_store import check_date

# público: reserva de pacientes y consultas por referencia
router = APIRouter(prefix="/appointments", tags=["appointments"])
# panel de la clínica
clinic_router = APIRouter(prefix="/clinics/{clinic_id}/appointments", tags=["appointments"])

def _booking_out(result: scheduler.BookingResult) -> BookingOut:
    return BookingOut(
        appointment_id=result.appointment_id,
        queue_number=result.queue_number,
        reference_number=result.reference_number,
        status=result.status,
        appointment=AppointmentOut.model_validate(result.appointment),
    )

async def _book(payload: AppointmentCreate, db: AsyncSession, clinic_id: str | None = None) -> BookingOut:
    result = await scheduler.book_appointment(
        db,
        doctor_id=payload.doctor_id,
        shift_time_id=payload.shift_time_id,
        patient=payload.patient(),
        appointment_date=payload.appointment_date,
        appointment_time=payload.appointment_time,
        clinic_id=clinic_id,
    )
    return _booking_out(result)

# ---------- público ----------
@router.post("/", response_model=BookingOut, status_code=201)
async def create_appointment(payload: AppointmentCreate, db: AsyncSession = Depends(get_db)):
    return await _book(payload, db)

@router.get("/reference/{reference}", response_model=AppointmentOut)
async def get_appointment_by_reference(reference: str, db: AsyncSession = Depends(get_db)):
    return await scheduler.get_by_reference(db, reference)

@router.get("/shift-times/{doctor_id}/{date}", response_model=list[ShiftOut])
async def get_bookable_shift_times(doctor_id: str, date: str, db: AsyncSession = Depends(get_db)):
    _, shifts = await doctor_shifts.get_doctor_availability(db, doctor_id, date, available_only=True)
    return shifts

@router.get("/counter", response_model=CounterOut)
async def get_counter(
    doctor_id: str = Query(...),
    shift_time_id: str = Query(...),
    date: str = Query(..., description="YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
):
    day = check_date(date, 0)
    value = await get_counter_value(db, doctor_id, shift_time_id, day)
    return CounterOut(doctor_id=doctor_id, shift_time_id=shift_time_id, date=day, current_queue=value)

# ---------- clínica ----------
@clinic_router.post("/", response_model=BookingOut, status_code=201)
async def create_clinic_appointment(
    payload: AppointmentCreate,
    clinic: Clinic = Depends(require_clinic),
    db: AsyncSession = Depends(get_db),
):
    return await _book(payload, db, clinic_id=clinic.id)

@clinic_router.get("/", response_model=list[AppointmentOut])
async def list_clinic_appointments(
    doctor_id: str | None = Query(None),
    date: str | None = Query(None),
    status: ApptStatus | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    clinic: Clinic = Depends(require_clinic),
    db: AsyncSession = Depends(get_db),
):
    return await scheduler.list_appointments(
        db, clinic.id, doctor_id=doctor_id, date=date, status=status, limit=limit, offset=offset
    )

@clinic_router.get("/{appointment_id}", response_model=AppointmentOut)
async def get_clinic_appointment(
    appointment_id: str, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    return await scheduler.get_appointment(db, appointment_id, clinic.id)

@clinic_router.patch("/{appointment_id}/status", response_model=AppointmentOut)
async def update_appointment_status(
    appointment_id: str,
    patch: AppointmentStatusUpdate,
    clinic: Clinic = Depends(require_clinic),
    db: AsyncSession = Depends(get_db),
):
    return await scheduler.update_status(db, appointment_id, patch.status, clinic.id)

@clinic_router.patch("/{appointment_id}/read", response_model=AppointmentOut)
async def mark_appointment_read(
    appointment_id: str, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    return await scheduler.mark_read(db, appointment_id, clinic.id)

# ---------- pago ----------
@clinic_router.post("/{appointment_id}/payment", response_model=PaymentOut, status_code=201)
async def create_payment(
    appointment_id: str,
    payload: PaymentCreate,
    clinic: Clinic = Depends(require_clinic),
    db: AsyncSession = Depends(get_db),
):
    return await payments.record_payment(
        db,
        appointment_id,
        consultation_fee=payload.consultation_fee,
        medication_fee=payload.medication_fee,
        payment_method=payload.payment_method,
        clinic_id=clinic.id,
    )

@clinic_router.get("/{appointment_id}/payment", response_model=PaymentOut)
async def get_payment(
    appointment_id: str, clinic: Clinic = Depends(require_clinic), db: AsyncSession = Depends(get_db)
):
    return await payments.get_payment_for_appointment(db, appointment_id, clinic.id)
