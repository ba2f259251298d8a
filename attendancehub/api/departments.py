from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.middleware import ROLE_ADMIN, get_current_user, require_role
from attendancehub.db.models import DepartmentPosition, Employee, User
from attendancehub.db.session import get_db
from attendancehub.schemas.employee import DepartmentChart, PositionCreate, PositionResponse
from attendancehub.services.org_chart import build_org_chart

router = APIRouter()


@router.get("/positions", response_model=list[PositionResponse], summary="Configured positions")
async def list_positions(
    department: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> list[PositionResponse]:
    stmt = select(DepartmentPosition)
    if department:
        stmt = stmt.where(DepartmentPosition.department == department)
    stmt = stmt.order_by(DepartmentPosition.department, DepartmentPosition.position_name)
    rows = (await db.scalars(stmt)).all()
    return [PositionResponse.model_validate(p) for p in rows]


@router.post(
    "/positions",
    response_model=PositionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a position to a department (admin only)",
)
async def create_position(
    body: PositionCreate,
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> PositionResponse:
    existing = await db.scalar(
        select(DepartmentPosition).where(
            DepartmentPosition.department == body.department,
            DepartmentPosition.position_name == body.position_name,
        )
    )
    if existing is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Position '{body.position_name}' already exists in {body.department}",
        )

    position = DepartmentPosition(**body.model_dump())
    db.add(position)
    await db.commit()
    await db.refresh(position)
    return PositionResponse.model_validate(position)


@router.get("/org-chart", response_model=list[DepartmentChart], summary="Org chart per department")
async def org_chart(
    department: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> list[DepartmentChart]:
    positions = (await db.scalars(select(DepartmentPosition))).all()
    employees = (await db.scalars(select(Employee))).all()
    return build_org_chart(positions, employees, department)
