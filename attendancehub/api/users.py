import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.middleware import ROLE_ADMIN, ROLE_MANAGER, get_current_user, require_role
from attendancehub.core.security import hash_password
from attendancehub.db.models import Employee, User
from attendancehub.db.session import get_db
from attendancehub.schemas.user import UserCreate, UserResponse, UserUpdate
from attendancehub.services.audit import AuditSink, get_audit_sink, record_action

router = APIRouter()


async def _ensure_employee(db: AsyncSession, employee_id: uuid.UUID | None) -> None:
    if employee_id is not None and await db.get(Employee, employee_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Employee not found",
        )


@router.post(
    "/",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a login account (admin only)",
)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> UserResponse:
    existing = await db.scalar(select(User).where(User.username == body.username))
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Username '{body.username}' is already taken",
        )
    await _ensure_employee(db, body.employee_id)

    user = User(
        username=body.username,
        password_hash=hash_password(body.password),
        role=body.role,
        full_name=body.full_name,
        email=body.email,
        employee_id=body.employee_id,
        is_active=True,
    )
    db.add(user)
    await db.flush()
    await record_action(
        sink, current_user, "CREATE", "user", user.id,
        f"Cuenta '{user.username}' con rol {user.role}",
    )
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.get("/", summary="List users with pagination and optional search")
async def list_users(
    search: str | None = Query(default=None, description="Filter by name, username or email"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=1000),
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
) -> dict:
    q = select(User)
    if search:
        q = q.where(
            User.full_name.ilike(f"%{search}%")
            | User.username.ilike(f"%{search}%")
            | User.email.ilike(f"%{search}%")
        )
    all_users = (await db.scalars(q.order_by(User.username))).all()
    total = len(all_users)
    offset = (page - 1) * per_page

    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if total > 0 else 1,
        "items": [UserResponse.model_validate(u) for u in all_users[offset : offset + per_page]],
    }


@router.get("/me", response_model=UserResponse, summary="Current authenticated user")
async def get_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.patch("/{user_id}", response_model=UserResponse, summary="Update a user (admin only)")
async def update_user(
    user_id: uuid.UUID,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    changes = body.model_dump(exclude_unset=True)
    if changes.get("is_active") is False and user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You cannot deactivate yourself",
        )
    if "employee_id" in changes:
        await _ensure_employee(db, changes["employee_id"])

    password = changes.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for key, value in changes.items():
        setattr(user, key, value)

    await db.flush()
    await record_action(
        sink, current_user, "UPDATE", "user", user.id, f"Actualización de '{user.username}'",
        {"fields": sorted(changes) + (["password"] if password else [])},
    )
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)
