import secrets
import string
import time

from app.core.config import settings

def gen_code(n: int = 6) -> str:
    return "".join(secrets.choice(string.digits) for _ in range(n))

def appointment_reference() -> str:
    # REF-<epoch en microsegundos>-<6 dígitos al azar>; la unicidad la asegura la columna unique
    return f"{settings.APPOINTMENT_REFERENCE_PREFIX}-{time.time_ns() // 1_000}-{gen_code()}"

def payment_reference() -> str:
    return f"{settings.PAYMENT_REFERENCE_PREFIX}-{time.time_ns() // 1_000}-{gen_code()}"
