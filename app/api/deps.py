from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.errors import NotFoundError
from app.models.clinic import Clinic


# --- clínica del path: todo lo que cuelga de /clinics/{clinic_id} pasa por acá ---
async def require_clinic(clinic_id: str, db: AsyncSession = Depends(get_db)) -> Clinic:
    res = await db.execute(select(Clinic).where(Clinic.id == clinic_id))
    clinic = res.scalar_one_or_none()
    if not clinic:
        raise NotFoundError("Clínica no encontrada", clinic_id=clinic_id)
    return clinic
