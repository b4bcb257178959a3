"""initial queue schema

Revision ID: 5b1c0e7a9d21
Revises:
Create Date: 2025-11-03 18:12:40.511203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1c0e7a9d21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

gender = sa.Enum("Male", "Female", name="genderenum")
shift_status = sa.Enum("Available", "Unavailable", name="shiftstatus")
appt_status = sa.Enum("Pending", "Confirm", "Completed", "Cancelled", name="apptstatus")
payment_method = sa.Enum("Cash", "Card", "Online", name="paymentmethod")


def upgrade() -> None:
    op.create_table(
        "clinics",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("city", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
    )
    op.create_index("ix_clinics_name", "clinics", ["name"])

    op.create_table(
        "doctors",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("gender", gender, nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column("specialization", sa.String(100), nullable=True),
        sa.Column("shift_time_ids", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False),
    )
    op.create_index("ix_doctors_clinic_id", "doctors", ["clinic_id"])

    op.create_table(
        "shift_times",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("time_range", sa.String(64), nullable=False),
        sa.Column("shift_name", sa.String(100), nullable=False),
        sa.Column("status", shift_status, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("max_appointments", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False),
    )
    op.create_index("ix_shift_times_clinic_id", "shift_times", ["clinic_id"])
    # no es unique: las filas inactivas históricas comparten clave
    op.create_index("ix_shift_doctor_date_range", "shift_times", ["doctor_id", "date", "time_range"])
    op.create_index("ix_shift_doctor_active", "shift_times", ["doctor_id", "is_active"])

    op.create_table(
        "queue_counters",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("shift_time_id", sa.String(36), sa.ForeignKey("shift_times.id"), nullable=False),
        sa.Column("date", sa.String(10), nullable=False),
        sa.Column("current_queue", sa.Integer(), nullable=False),
        sa.Column("last_reset", sa.DateTime(timezone=False), nullable=False),
        sa.UniqueConstraint("doctor_id", "shift_time_id", "date", name="uq_queue_counter_key"),
    )

    op.create_table(
        "appointments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("shift_time_id", sa.String(36), sa.ForeignKey("shift_times.id"), nullable=False),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("patient_gender", gender, nullable=False),
        sa.Column("patient_age", sa.Integer(), nullable=False),
        sa.Column("patient_contact", sa.String(50), nullable=False),
        sa.Column("appointment_date", sa.String(10), nullable=False),
        sa.Column("appointment_time", sa.String(64), nullable=False),
        sa.Column("queue_number", sa.Integer(), nullable=False),
        sa.Column("reference_number", sa.String(64), nullable=False, unique=True),
        sa.Column("status", appt_status, nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("booking_date", sa.DateTime(timezone=False), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=False), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=False), nullable=False),
    )
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_shift_time_id", "appointments", ["shift_time_id"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appt_clinic_date", "appointments", ["clinic_id", "appointment_date"])

    op.create_table(
        "payments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("appointment_id", sa.String(36), sa.ForeignKey("appointments.id"), nullable=False, unique=True),
        sa.Column("clinic_id", sa.String(36), sa.ForeignKey("clinics.id"), nullable=False),
        sa.Column("doctor_id", sa.String(36), sa.ForeignKey("doctors.id"), nullable=False),
        sa.Column("patient_name", sa.String(255), nullable=False),
        sa.Column("patient_contact", sa.String(50), nullable=False),
        sa.Column("consultation_fee", sa.Float(), nullable=False),
        sa.Column("medication_fee", sa.Float(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("payment_method", payment_method, nullable=False),
        sa.Column("reference_number", sa.String(64), nullable=False, unique=True),
        sa.Column("paid_at", sa.DateTime(timezone=False), nullable=False),
    )
    op.create_index("ix_payments_clinic_id", "payments", ["clinic_id"])
    op.create_index("ix_payments_doctor_id", "payments", ["doctor_id"])


def downgrade() -> None:
    # Borrar en orden inverso
    op.drop_index("ix_payments_doctor_id", table_name="payments")
    op.drop_index("ix_payments_clinic_id", table_name="payments")
    op.drop_table("payments")

    op.drop_index("ix_appt_clinic_date", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_shift_time_id", table_name="appointments")
    op.drop_index("ix_appointments_doctor_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_table("queue_counters")

    op.drop_index("ix_shift_doctor_active", table_name="shift_times")
    op.drop_index("ix_shift_doctor_date_range", table_name="shift_times")
    op.drop_index("ix_shift_times_clinic_id", table_name="shift_times")
    op.drop_table("shift_times")

    op.drop_index("ix_doctors_clinic_id", table_name="doctors")
    op.drop_table("doctors")

    op.drop_index("ix_clinics_name", table_name="clinics")
    op.drop_table("clinics")
