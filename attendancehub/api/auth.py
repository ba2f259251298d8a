import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.security import issue_access_token, verify_password
from attendancehub.db.models import User
from attendancehub.db.session import get_db
from attendancehub.schemas.auth import LoginRequest, TokenResponse
from attendancehub.services.audit import AuditSink, get_audit_sink, record_action

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse, summary="Exchange credentials for a bearer token")
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
) -> TokenResponse:
    user = await db.scalar(select(User).where(User.username == body.username))

    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("Intento de acceso fallido para '%s'", body.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    token, expires_in = issue_access_token(user.id, user.role, user.employee_id)
    await record_action(sink, user, "LOGIN", "user", user.id, "Inicio de sesión")
    await db.commit()

    return TokenResponse(
        access_token=token,
        expires_in=expires_in,
    )
