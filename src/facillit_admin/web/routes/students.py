"""Student endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from facillit_admin.backend.client import BackendClient, BackendError
from facillit_admin.core.students import (
    StatusFilter,
    StudentListView,
    StudentNotFoundError,
    delete_prompt,
    fetch_student,
    format_user_code,
    location_label,
    present_profile,
    verification_prompt,
)
from facillit_admin.web.deps import (
    AdminContext,
    get_backend,
    require_admin,
    require_confirmation,
)
from facillit_admin.web.schemas import (
    InfoItem,
    StudentDetailResponse,
    StudentListResponse,
    StudentStats,
    StudentSummary,
    VerificationRequest,
    VerificationResponse,
)

router = APIRouter(prefix="/api/students", tags=["students"])


def _summary(row: dict) -> StudentSummary:
    return StudentSummary(
        id=str(row["id"]),
        user_id=row.get("user_id"),
        user_code=format_user_code(row.get("user_id")),
        full_name=row.get("full_name"),
        nickname=row.get("nickname"),
        location=location_label(row),
        is_verified=bool(row.get("is_verified")),
        created_at=row.get("created_at"),
    )


@router.get("", response_model=StudentListResponse)
async def list_students(
    search: str = "",
    status_filter: StatusFilter = Query(StatusFilter.ALL, alias="status"),
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> StudentListResponse:
    """List students, filtered by search text and verification status."""
    view = StudentListView(backend, admin.access_token)
    view.load()
    rows = view.filtered(search, status_filter)

    return StudentListResponse(
        students=[_summary(row) for row in rows],
        count=len(rows),
        stats=StudentStats(**view.stats()),
        search=search,
        status=status_filter,
        status_label=status_filter.label,
        error=view.error,
    )


@router.get("/{student_id}", response_model=StudentDetailResponse)
async def get_student(
    student_id: str,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> StudentDetailResponse:
    """Full student record."""
    try:
        row = fetch_student(backend, student_id, admin.access_token)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BackendError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Falha ao buscar dados do aluno.",
        )

    return StudentDetailResponse(
        id=str(row["id"]),
        user_code=format_user_code(row.get("user_id")),
        full_name=row.get("full_name"),
        is_verified=bool(row.get("is_verified")),
        fields=[InfoItem(label=label, value=value) for label, value in present_profile(row)],
        profile=row,
    )


@router.post("/{student_id}/verification", response_model=VerificationResponse)
async def set_verification(
    student_id: str,
    body: VerificationRequest,
    confirm: bool = False,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> VerificationResponse:
    """Grant or remove the verification badge."""
    require_confirmation(confirm, verification_prompt(body.is_verified))

    view = StudentListView(backend, admin.access_token)
    if not view.set_verified(student_id, body.is_verified):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=view.error)

    return VerificationResponse(id=student_id, is_verified=body.is_verified)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: str,
    confirm: bool = False,
    name: str = "",
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> None:
    """Delete a student profile. Irreversible."""
    require_confirmation(confirm, delete_prompt(name))

    view = StudentListView(backend, admin.access_token)
    if not view.delete(student_id):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=view.error)
