"""
Seed script: default admin account plus a starter org structure.

Usage:
    python -m attendancehub.db.seed
"""

import asyncio
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.security import hash_password
from attendancehub.db.models import DepartmentPosition, User
from attendancehub.db.session import AsyncSessionLocal

logger = logging.getLogger(__name__)

DEFAULT_POSITIONS = [
    {
        "department": "Recursos Humanos",
        "position_name": "Jefe de RRHH",
        "is_leadership": True,
        "responsibilities": ["Aprobar justificaciones", "Validar asistencia mensual"],
    },
    {
        "department": "Recursos Humanos",
        "position_name": "Analista de RRHH",
        "reports_to": "Jefe de RRHH",
        "max_positions": 2,
        "responsibilities": ["Cargar reportes biométricos"],
    },
    {
        "department": "Operaciones",
        "position_name": "Jefe de Operaciones",
        "is_leadership": True,
    },
    {
        "department": "Operaciones",
        "position_name": "Operario",
        "reports_to": "Jefe de Operaciones",
        "max_positions": 10,
    },
]


async def create_admin(session: AsyncSession) -> User:
    admin = await session.scalar(select(User).where(User.username == "admin"))
    if admin:
        logger.info("El usuario admin ya existe, se omite.")
        return admin

    admin = User(
        username="admin",
        password_hash=hash_password("admin123"),
        role="admin",
        full_name="Administrador del Sistema",
        is_active=True,
    )
    session.add(admin)
    await session.flush()
    logger.info("Usuario admin creado: id=%s", admin.id)
    return admin


async def create_positions(session: AsyncSession) -> int:
    existing = {
        (p.department, p.position_name)
        for p in (await session.scalars(select(DepartmentPosition))).all()
    }
    created = 0
    for data in DEFAULT_POSITIONS:
        if (data["department"], data["position_name"]) in existing:
            continue
        session.add(DepartmentPosition(**data))
        created += 1
    await session.flush()
    return created


async def main():
    async with AsyncSessionLocal() as session:
        async with session.begin():
            await create_admin(session)
            created = await create_positions(session)
            logger.info("Seed completo: %d puestos nuevos.", created)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
