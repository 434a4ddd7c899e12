"""Achievement endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from facillit_admin.backend.client import BackendClient, BackendError
from facillit_admin.core.achievements import (
    DELETE_PROMPT,
    AchievementEditor,
    AchievementForm,
    AchievementListView,
    AchievementNotFoundError,
    CreateAchievement,
    TargetInput,
    UpdateAchievement,
    fetch_achievement,
    target_input_for,
)
from facillit_admin.core.catalog import METRIC_CATALOG, IconName
from facillit_admin.web.deps import (
    AdminContext,
    get_backend,
    require_admin,
    require_confirmation,
)
from facillit_admin.web.schemas import (
    AchievementEditResponse,
    AchievementFormSchema,
    AchievementListResponse,
    AchievementResponse,
    CatalogResponse,
    MetricResponse,
    SaveResponse,
    TargetInputResponse,
)

router = APIRouter(prefix="/api/achievements", tags=["achievements"])


def _form(body: AchievementFormSchema) -> AchievementForm:
    form = AchievementForm(**body.model_dump())
    form.select_metric(body.metric_name)
    return form


def _target_input(widget: TargetInput) -> TargetInputResponse:
    return TargetInputResponse(
        kind=widget.kind,
        unit=widget.unit,
        minimum=widget.minimum,
        options=list(widget.options),
    )


@router.get("", response_model=AchievementListResponse)
async def list_achievements(
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> AchievementListResponse:
    """List achievement definitions with their target/status labels."""
    view = AchievementListView(backend, admin.access_token)
    view.load()
    rows = view.labelled_rows()

    return AchievementListResponse(
        achievements=[AchievementResponse(**row) for row in rows],
        count=len(rows),
        error=view.error,
    )


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(admin: AdminContext = Depends(require_admin)) -> CatalogResponse:
    """Metric catalog, icon set and the blank form."""
    metrics = [
        MetricResponse(
            key=metric.key,
            label=metric.label,
            unit=metric.unit,
            type=metric.type.value,
            description=metric.description,
            target_input=_target_input(target_input_for(metric)),
        )
        for metric in METRIC_CATALOG
    ]

    return CatalogResponse(
        metrics=metrics,
        icons=[icon.value for icon in IconName],
        default_form=AchievementFormSchema(),
    )


@router.get("/{achievement_id}", response_model=AchievementEditResponse)
async def get_achievement(
    achievement_id: int,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> AchievementEditResponse:
    """Load one definition into the edit form."""
    try:
        row = fetch_achievement(backend, achievement_id, admin.access_token)
    except AchievementNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)

    form = AchievementForm.from_row(row)
    widget = form.target_input()

    return AchievementEditResponse(
        id=achievement_id,
        form=AchievementFormSchema(**asdict(form)),
        target_input=_target_input(widget) if widget is not None else None,
    )


@router.post("", response_model=SaveResponse, status_code=status.HTTP_201_CREATED)
async def create_achievement(
    body: AchievementFormSchema,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> SaveResponse:
    """Create an achievement definition."""
    editor = AchievementEditor(backend, admin.access_token)
    return SaveResponse(message=editor.save(CreateAchievement(_form(body))))


@router.put("/{achievement_id}", response_model=SaveResponse)
async def update_achievement(
    achievement_id: int,
    body: AchievementFormSchema,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> SaveResponse:
    """Update an achievement definition."""
    editor = AchievementEditor(backend, admin.access_token)
    return SaveResponse(message=editor.save(UpdateAchievement(achievement_id, _form(body))))


@router.delete("/{achievement_id}", response_model=SaveResponse)
async def delete_achievement(
    achievement_id: int,
    confirm: bool = False,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> SaveResponse:
    """Delete an achievement definition."""
    require_confirmation(confirm, DELETE_PROMPT)

    view = AchievementListView(backend, admin.access_token)
    if not view.delete(achievement_id):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=view.error)
    return SaveResponse(message=view.success)
