from datetime import datetime
from pydantic import BaseModel, Field
from typing import Optional, List
from app.models.shift_time import ShiftStatus

# los campos van como str sueltos: el formato lo valida app.services.shift_store
# para poder responder con la posición del turno que falló
class ShiftIn(BaseModel):
    date: Optional[str] = None
    time_range: Optional[str] = None
    shift_name: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None
    max_appointments: Optional[int] = None

class ShiftUpdateIn(BaseModel):
    shift_id: str
    date: Optional[str] = None
    time_range: Optional[str] = None
    shift_name: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None
    max_appointments: Optional[int] = None

class ShiftBatch(BaseModel):
    shifts: List[ShiftIn] = Field(..., description="Turnos a cargar")

class ShiftRemove(BaseModel):
    shift_ids: List[str]

class ShiftUpdates(BaseModel):
    updates: List[ShiftUpdateIn]

class ShiftOut(BaseModel):
    id: str
    clinic_id: str
    doctor_id: str
    date: str
    time_range: str
    shift_name: str
    status: ShiftStatus
    is_active: bool
    max_appointments: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ShiftOperationOut(BaseModel):
    operation: str
    shift_ids: List[str]
    doctor_shift_ids: List[str]

class DoctorAvailabilityOut(BaseModel):
    doctor_id: str
    doctor_name: str
    date: str
    shifts: List[ShiftOut]
