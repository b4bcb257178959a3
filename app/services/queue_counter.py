"""
Contador de turnos por (doctor, shift_time, fecha).

La reserva es un único INSERT ... ON CONFLICT / ON DUPLICATE KEY UPDATE
current_queue = current_queue + 1: crear la fila e incrementar es una sola
sentencia, así dos primeras reservas concurrentes no compiten por el INSERT.
No hay operación para liberar números: cancelar un turno no descuenta.
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError
from app.models.clinic import utcnow
from app.models.queue_counter import QueueCounter

logger = logging.getLogger(__name__)

KEY_COLUMNS = ("doctor_id", "shift_time_id", "date")
# 1213 deadlock, 1205 lock wait timeout (MySQL / MariaDB)
LOCK_ERROR_CODES = {1205, 1213}


def _key(doctor_id: str, shift_time_id: str, date: str):
    return (
        QueueCounter.doctor_id == doctor_id,
        QueueCounter.shift_time_id == shift_time_id,
        QueueCounter.date == date,
    )

def _upsert_increment(dialect_name: str, doctor_id: str, shift_time_id: str, date: str):
    values = {
        "id": str(uuid.uuid4()),
        "doctor_id": doctor_id,
        "shift_time_id": shift_time_id,
        "date": date,
        "current_queue": 1,
        "last_reset": utcnow(),
    }
    bump = QueueCounter.current_queue + 1

    if dialect_name in ("mysql", "mariadb"):
        return mysql.insert(QueueCounter).values(**values).on_duplicate_key_update(current_queue=bump)
    if dialect_name == "sqlite":
        stmt = sqlite.insert(QueueCounter).values(**values)
    elif dialect_name == "postgresql":
        stmt = postgresql.insert(QueueCounter).values(**values)
    else:
        raise NotImplementedError(f"Contador de turnos no soportado para {dialect_name}")
    return stmt.on_conflict_do_update(index_elements=list(KEY_COLUMNS), set_={"current_queue": bump})

def _is_lock_conflict(exc: OperationalError) -> bool:
    args = getattr(exc.orig, "args", ())
    if args and args[0] in LOCK_ERROR_CODES:
        return True
    return "database is locked" in str(exc.orig)

async def reserve_next(db: AsyncSession, doctor_id: str, shift_time_id: str, date: str) -> int:
    """
    Reserva el siguiente número para la clave y lo devuelve (el primero es 1).
    Tiene que correr dentro de la transacción del turno que se está creando.
    """
    stmt = _upsert_increment(db.get_bind().dialect.name, doctor_id, shift_time_id, date)
    try:
        await db.execute(stmt)
    except OperationalError as exc:
        if not _is_lock_conflict(exc):
            raise
        # el rollback lo hace la transacción del que llama; el cliente puede reintentar
        raise ConflictError(
            "No se pudo reservar un número de turno, reintentar",
            doctor_id=doctor_id,
            shift_time_id=shift_time_id,
            date=date,
        ) from exc

    value = (await db.execute(
        select(QueueCounter.current_queue).where(*_key(doctor_id, shift_time_id, date))
    )).scalar_one()
    logger.debug("Reserved queue number %d for %s/%s/%s", value, doctor_id, shift_time_id, date)
    return value

async def get_counter_value(db: AsyncSession, doctor_id: str, shift_time_id: str, date: str) -> int:
    """Solo lectura: 0 si todavía no existe el contador."""
    value = (await db.execute(
        select(QueueCounter.current_queue).where(*_key(doctor_id, shift_time_id, date))
    )).scalar_one_or_none()
    return value or 0
