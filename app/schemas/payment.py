from datetime import datetime
from pydantic import BaseModel
from app.models.payment import PaymentMethod

class PaymentCreate(BaseModel):
    consultation_fee: float = 0
    medication_fee: float = 0
    payment_method: str = PaymentMethod.Cash.value

class PaymentOut(BaseModel):
    id: str
    appointment_id: str
    clinic_id: str
    doctor_id: str
    patient_name: str
    patient_contact: str
    consultation_fee: float
    medication_fee: float
    total_amount: float
    payment_method: PaymentMethod
    reference_number: str
    paid_at: datetime

    class Config:
        from_attributes = True
