from datetime import datetime
from pydantic import BaseModel, EmailStr
from typing import Optional, List
from app.models.doctor import GenderEnum
from app.schemas.shift_time import ShiftIn

class DoctorCreate(BaseModel):
    name: str
    gender: GenderEnum
    phone_number: str
    email: Optional[EmailStr] = None
    city: str
    specialization: Optional[str] = None

class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    gender: Optional[GenderEnum] = None
    phone_number: Optional[str] = None
    email: Optional[EmailStr] = None
    city: Optional[str] = None
    specialization: Optional[str] = None
    # si viene, se hace upsert de los turnos junto con los datos
    shift_times: Optional[List[ShiftIn]] = None

class DoctorOut(BaseModel):
    id: str
    clinic_id: str
    name: str
    gender: GenderEnum
    phone_number: str
    email: Optional[EmailStr] = None
    city: str
    specialization: Optional[str] = None
    shift_time_ids: List[str] = []
    is_active: bool = True
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # permite pasarle un modelo ORM
