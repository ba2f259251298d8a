import logging
import subprocess
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from attendancehub.api.attendance import router as attendance_router
from attendancehub.api.audit import router as audit_router
from attendancehub.api.auth import router as auth_router
from attendancehub.api.departments import router as departments_router
from attendancehub.api.employees import router as employees_router
from attendancehub.api.requests import (
    justifications_router,
    permissions_router,
    vacations_router,
)
from attendancehub.api.sanctions import router as sanctions_router
from attendancehub.api.users import router as users_router
from attendancehub.core.config import settings
from attendancehub.core.middleware import register_error_handlers

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Apply Alembic migrations on startup when enabled."""
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        logger.info("Aplicando migraciones de Alembic...")
        try:
            result = subprocess.run(
                ["alembic", "upgrade", "head"],
                capture_output=True,
                text=True,
                cwd=PROJECT_ROOT,
            )
            if result.returncode != 0:
                logger.error("Falló la migración de Alembic:\n%s", result.stderr)
            else:
                logger.info("Migraciones aplicadas:\n%s", result.stdout)
        except OSError as exc:
            logger.exception("No se pudieron ejecutar las migraciones: %s", exc)

    yield

    logger.info("Apagando AttendanceHub.")


app = FastAPI(
    title="AttendanceHub API",
    description="Control de asistencia, justificaciones y permisos a partir de reportes biométricos.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth_router, prefix="/api/auth", tags=["Auth"])
app.include_router(users_router, prefix="/api/users", tags=["Users"])
app.include_router(employees_router, prefix="/api/employees", tags=["Employees"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(justifications_router, prefix="/api/justifications", tags=["Justifications"])
app.include_router(vacations_router, prefix="/api/vacations", tags=["Vacations"])
app.include_router(permissions_router, prefix="/api/permissions", tags=["Permissions"])
app.include_router(sanctions_router, prefix="/api/sanctions", tags=["Sanctions"])
app.include_router(audit_router, prefix="/api/audit", tags=["Audit"])
app.include_router(departments_router, prefix="/api/departments", tags=["Departments"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
