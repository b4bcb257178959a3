import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import ClinicQueueError
from app.api.v1.clinic import router as clinic_router
from app.api.v1.doctor import router as doctor_router
from app.api.v1.appointment import router as appointment_router, clinic_router as clinic_appointment_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title=settings.APP_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(clinic_router)
app.include_router(doctor_router)
app.include_router(clinic_appointment_router)
app.include_router(appointment_router)


@app.exception_handler(ClinicQueueError)
async def clinic_queue_error_handler(request: Request, exc: ClinicQueueError):
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__, **exc.context},
    )


@app.get("/health")
async def health():
    return {"status": "ok"}
