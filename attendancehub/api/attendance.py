import datetime as dt
import io
import logging
import math
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendancehub.core.middleware import ROLE_ADMIN, ROLE_MANAGER, require_role
from attendancehub.db.attendance_repo import AttendanceRepository
from attendancehub.db.models import AttendanceRecord, ImportHistory, User
from attendancehub.db.session import get_db
from attendancehub.schemas.attendance import (
    AttendanceRecordResponse,
    BiometricUploadResult,
    ConflictPolicy,
    DuplicateCheckResult,
    ImportHistoryItem,
    ParsedBiometricReport,
    ProcessRowsRequest,
    ReportCounts,
    SaveReportResponse,
    UploadPreviewResponse,
    UploadResult,
)
from attendancehub.schemas.deductions import DeductionRequest, DeductionSummary
from attendancehub.services.audit import AuditSink, get_audit_sink, record_action
from attendancehub.services.biometric_processor import process_biometric_data
from attendancehub.services.deductions import calculate_deductions
from attendancehub.services.employees import list_known_employees
from attendancehub.services.excel_parser import (
    ALLOWED_EXTENSIONS,
    file_extension,
    parse_biometric_file,
)
from attendancehub.services.fuzzy_matcher import attach_suggestions
from attendancehub.services.period_report import build_period_report
from attendancehub.services.upload_resolver import (
    check_for_duplicates,
    save_attendance_records,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _import_status(result: UploadResult) -> str:
    if not result.errors:
        return "success"
    if result.records_saved or result.records_skipped:
        return "partial"
    return "failed"


@router.post(
    "/process",
    response_model=BiometricUploadResult,
    summary="Classify a biometric report given as a row matrix",
)
async def process_rows(
    body: ProcessRowsRequest,
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> BiometricUploadResult:
    employees = await list_known_employees(db)
    return process_biometric_data(body.rows, employees)


@router.post(
    "/upload",
    response_model=UploadPreviewResponse,
    summary="Upload a biometric spreadsheet and preview the period report",
)
async def upload_file(
    file: UploadFile,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> UploadPreviewResponse:
    filename = file.filename or "unknown"
    ext = file_extension(file.filename)
    logger.info("Carga de archivo: '%s' (extensión: '%s', usuario: %s)", filename, ext, current_user.id)

    if ext not in ALLOWED_EXTENSIONS:
        logger.warning("Archivo '%s' rechazado: extensión no permitida '%s'", filename, ext)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type '{ext}'. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        )

    content = await file.read()
    rows, parse_errors = parse_biometric_file(io.BytesIO(content), filename)
    for message in parse_errors:
        logger.warning("Error de lectura [%s]: %s", filename, message)

    employees = await list_known_employees(db)
    summary = process_biometric_data(rows, employees)
    report = build_period_report(summary, employees, filename)

    counts = None
    duplicates = None
    if report is not None:
        attach_suggestions(report, employees)
        counts = ReportCounts.of(report)
        duplicates = await check_for_duplicates(report, AttendanceRepository(db))

    logger.info(
        "Previsualización [%s]: filas=%d, coincidentes=%d, sin coincidencia=%d, errores=%d",
        filename, summary.total_records, summary.processed_records,
        summary.unmatched_records, len(parse_errors),
    )
    return UploadPreviewResponse(
        filename=filename,
        parse_errors=parse_errors,
        summary=summary,
        report=report,
        counts=counts,
        duplicates=duplicates,
    )


@router.post(
    "/duplicates",
    response_model=DuplicateCheckResult,
    summary="Existing attendance rows that overlap the report period",
)
async def find_duplicates(
    report: ParsedBiometricReport,
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> DuplicateCheckResult:
    return await check_for_duplicates(report, AttendanceRepository(db))


@router.post(
    "/save",
    response_model=SaveReportResponse,
    summary="Persist a period report under a conflict policy",
)
async def save_report(
    report: ParsedBiometricReport,
    policy: ConflictPolicy = Query(..., description="overwrite | skip | cancel"),
    db: AsyncSession = Depends(get_db),
    sink: AuditSink = Depends(get_audit_sink),
    current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> SaveReportResponse:
    result = await save_attendance_records(report, policy, AttendanceRepository(db))
    import_status = _import_status(result)
    if policy == "cancel":
        return SaveReportResponse(**result.model_dump(), import_status=import_status)

    history = ImportHistory(
        filename=report.filename or "unknown",
        uploaded_by=current_user.id,
        period_start=report.period.start,
        period_end=report.period.end,
        status=import_status,
        logs={
            "total_employees": len(report.records),
            "saved": result.records_saved,
            "skipped": result.records_skipped,
            "errors": result.errors[:100],
        },
    )
    db.add(history)
    await record_action(
        sink, current_user, "UPLOAD", "attendance", report.filename or "unknown",
        f"Reporte {report.period.start.isoformat()} al {report.period.end.isoformat()} "
        f"guardado con política {policy}",
        {"saved": result.records_saved, "skipped": result.records_skipped, "errors": len(result.errors)},
    )
    await db.commit()

    return SaveReportResponse(**result.model_dump(), import_status=import_status)


@router.get(
    "/records",
    response_model=list[AttendanceRecordResponse],
    summary="Stored attendance rows, optionally filtered",
)
async def list_records(
    employee_id: uuid.UUID | None = Query(default=None),
    start: dt.date | None = Query(default=None),
    end: dt.date | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
) -> list[AttendanceRecordResponse]:
    stmt = select(AttendanceRecord)
    if employee_id:
        stmt = stmt.where(AttendanceRecord.employee_id == employee_id)
    if start:
        stmt = stmt.where(AttendanceRecord.date >= start)
    if end:
        stmt = stmt.where(AttendanceRecord.date <= end)
    rows = (await db.scalars(stmt.order_by(AttendanceRecord.date.desc()))).all()
    return [AttendanceRecordResponse.model_validate(r) for r in rows]


@router.get("/history", summary="List import history (paginated)")
async def list_history(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    _current_user: User = Depends(require_role(ROLE_ADMIN)),
) -> dict:
    all_rows = (
        await db.scalars(select(ImportHistory).order_by(ImportHistory.uploaded_at.desc()))
    ).all()
    total = len(all_rows)
    offset = (page - 1) * per_page

    return {
        "total": total,
        "page": page,
        "per_page": per_page,
        "pages": math.ceil(total / per_page) if total > 0 else 1,
        "items": [ImportHistoryItem.model_validate(h) for h in all_rows[offset : offset + per_page]],
    }


@router.post(
    "/deductions",
    response_model=DeductionSummary,
    summary="Per-employee deductions for a period report",
)
async def deductions(
    body: DeductionRequest,
    _current_user: User = Depends(require_role(ROLE_ADMIN, ROLE_MANAGER)),
) -> DeductionSummary:
    return calculate_deductions(body.report, body.config)
