from datetime import datetime
from pydantic import BaseModel
from app.models.appointment import ApptStatus
from app.models.doctor import GenderEnum

class AppointmentCreate(BaseModel):
    doctor_id: str
    shift_time_id: str
    patient_name: str
    patient_gender: str
    patient_age: int
    patient_contact: str
    appointment_date: str       # "YYYY-MM-DD"
    appointment_time: str

    def patient(self) -> dict:
        return self.model_dump(include={"patient_name", "patient_gender", "patient_age", "patient_contact"})

class AppointmentStatusUpdate(BaseModel):
    status: ApptStatus

class AppointmentOut(BaseModel):
    id: str
    clinic_id: str
    doctor_id: str
    shift_time_id: str
    patient_name: str
    patient_gender: GenderEnum
    patient_age: int
    patient_contact: str
    appointment_date: str
    appointment_time: str
    queue_number: int
    reference_number: str
    status: ApptStatus
    is_read: bool
    booking_date: datetime

    class Config:
        from_attributes = True

class BookingOut(BaseModel):
    appointment_id: str
    queue_number: int
    reference_number: str
    status: ApptStatus
    appointment: AppointmentOut

class CounterOut(BaseModel):
    doctor_id: str
    shift_time_id: str
    date: str
    current_queue: int
