import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import transaction
from app.core.errors import ValidationError, NotFoundError, ConflictError
from app.models.appointment import ApptStatus
from app.models.payment import Payment, PaymentMethod
from app.services import references
from app.services.scheduler import check_transition, get_appointment

logger = logging.getLogger(__name__)


def _validate_fees(consultation_fee, medication_fee, payment_method) -> list[str]:
    errors = []
    for name, fee in (("consultation_fee", consultation_fee), ("medication_fee", medication_fee)):
        if isinstance(fee, bool) or not isinstance(fee, (int, float)) or fee < 0:
            errors.append(f"{name} debe ser un número positivo")
    if payment_method not in {m.value for m in PaymentMethod}:
        errors.append("Método de pago inválido. Debe ser Cash, Card u Online")
    return errors

async def record_payment(
    db: AsyncSession,
    appointment_id: str,
    *,
    consultation_fee: float = 0,
    medication_fee: float = 0,
    payment_method: str = PaymentMethod.Cash.value,
    clinic_id: str | None = None,
) -> Payment:
    """Registra el pago y cierra el turno (Confirm -> Completed) en la misma transacción."""
    errors = _validate_fees(consultation_fee, medication_fee, payment_method)
    if errors:
        raise ValidationError("Datos de pago inválidos", errors=errors)

    async with transaction(db):
        ap = await get_appointment(db, appointment_id, clinic_id)
        check_transition(ap.status, ApptStatus.Completed)

        payment = Payment(
            appointment_id=ap.id,
            clinic_id=ap.clinic_id,
            doctor_id=ap.doctor_id,
            patient_name=ap.patient_name,
            patient_contact=ap.patient_contact,
            consultation_fee=float(consultation_fee),
            medication_fee=float(medication_fee),
            total_amount=float(consultation_fee) + float(medication_fee),
            payment_method=PaymentMethod(payment_method),
            reference_number=references.payment_reference(),
        )
        db.add(payment)
        ap.status = ApptStatus.Completed
        try:
            await db.flush()
        except IntegrityError as exc:
            raise ConflictError("El turno ya tiene un pago registrado", appointment_id=appointment_id) from exc

    logger.info("Payment %s recorded for appointment %s (%.2f)", payment.reference_number, ap.id, payment.total_amount)
    return payment

async def get_payment_for_appointment(db: AsyncSession, appointment_id: str, clinic_id: str | None = None) -> Payment:
    q = select(Payment).where(Payment.appointment_id == appointment_id)
    if clinic_id is not None:
        q = q.where(Payment.clinic_id == clinic_id)
    payment = (await db.execute(q)).scalar_one_or_none()
    if payment is None:
        raise NotFoundError("Pago no encontrado", appointment_id=appointment_id)
    return payment
