from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_clinic
from app.core.db import get_db
from app.models.clinic import Clinic
from app.schemas.clinic import ClinicCreate, ClinicOut

router = APIRouter(prefix="/clinics", tags=["clinics"])

# ---------- create ----------
@router.post("/", response_model=ClinicOut, status_code=201)
async def create_clinic(payload: ClinicCreate, db: AsyncSession = Depends(get_db)):
    clinic = Clinic(**payload.model_dump())
    db.add(clinic)
    await db.commit()
    await db.refresh(clinic)
    return clinic

# ---------- list ----------
@router.get("/", response_model=list[ClinicOut])
async def list_clinics(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    q = select(Clinic).order_by(Clinic.name).offset(offset).limit(limit)
    rows = (await db.execute(q)).scalars().all()
    return rows

# ---------- read ----------
@router.get("/{clinic_id}", response_model=ClinicOut)
async def get_clinic(clinic: Clinic = Depends(require_clinic)):
    return clinic
