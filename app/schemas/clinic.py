from datetime import datetime
from pydantic import BaseModel, EmailStr
from typing import Optional

class ClinicCreate(BaseModel):
    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

class ClinicOut(ClinicCreate):
    id: str
    created_at: datetime

    class Config:
        from_attributes = True
