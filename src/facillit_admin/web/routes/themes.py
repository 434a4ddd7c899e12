"""Writing theme endpoints.

Create and update take multipart form data: a `theme` field holding the
theme as JSON, plus an optional `cover` image file.
"""

import json

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import ValidationError

from facillit_admin.backend.client import BackendClient, BackendError
from facillit_admin.config.app_config import AdminConfig
from facillit_admin.core.themes import (
    CATEGORY_SUGGESTIONS,
    DELETE_PROMPT,
    CoverFile,
    CoverImage,
    CreateTheme,
    ThemeDraft,
    ThemeListView,
    ThemeNotFoundError,
    ThemeSaver,
    UpdateTheme,
    block_from_dict,
    fetch_theme,
)
from facillit_admin.web.deps import (
    AdminContext,
    get_backend,
    get_config,
    require_admin,
    require_confirmation,
)
from facillit_admin.web.schemas import (
    ThemeFormSchema,
    ThemeListResponse,
    ThemeResponse,
    ThemeSaveResponse,
    ThemeSummary,
)

router = APIRouter(prefix="/api/themes", tags=["themes"])


def _parse_theme(raw: str) -> ThemeFormSchema:
    try:
        return ThemeFormSchema.model_validate_json(raw)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=json.loads(e.json()),
        )


def _has_file(cover: UploadFile | None) -> bool:
    return cover is not None and bool(cover.filename)


def _stored_theme(backend: BackendClient, theme_id: str, access_token: str) -> dict:
    try:
        return fetch_theme(backend, theme_id, access_token)
    except ThemeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except BackendError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)


async def _draft(form: ThemeFormSchema, cover: UploadFile | None) -> ThemeDraft:
    draft = ThemeDraft(
        title=form.title,
        description=form.description,
        category=form.category,
        difficulty=form.difficulty,
        structure_model=form.structure_model,
        guiding_texts=[block_from_dict(block.model_dump()) for block in form.guiding_texts],
        cover=CoverImage(persisted_url=form.cover_image_url),
    )
    if _has_file(cover):
        draft.choose_cover(
            CoverFile(
                file_name=cover.filename,
                data=await cover.read(),
                content_type=cover.content_type or "application/octet-stream",
            )
        )
    return draft


@router.get("", response_model=ThemeListResponse)
async def list_themes(
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> ThemeListResponse:
    """List writing themes, newest first."""
    view = ThemeListView(backend, admin.access_token)
    view.load()
    rows = view.labelled_rows()

    return ThemeListResponse(
        themes=[ThemeSummary(**{**row, "id": str(row["id"])}) for row in rows],
        count=len(rows),
        categories=list(CATEGORY_SUGGESTIONS),
        error=view.error,
    )


@router.get("/{theme_id}", response_model=ThemeResponse)
async def get_theme(
    theme_id: str,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> ThemeResponse:
    """Load one theme for the edit screen."""
    row = _stored_theme(backend, theme_id, admin.access_token)
    draft = ThemeDraft.from_row(row)

    return ThemeResponse(
        id=str(row["id"]),
        created_at=row.get("created_at"),
        **draft.to_row(draft.cover.persisted_url),
    )


@router.post("", response_model=ThemeSaveResponse, status_code=status.HTTP_201_CREATED)
async def create_theme(
    theme: str = Form(...),
    cover: UploadFile | None = File(None),
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
    config: AdminConfig = Depends(get_config),
) -> ThemeSaveResponse:
    """Create a theme. Any `id` in the payload is ignored."""
    draft = await _draft(_parse_theme(theme), cover)
    saver = ThemeSaver(backend, config.storage, admin.access_token)
    row = saver.save(CreateTheme(draft))
    return ThemeSaveResponse(message="Tema criado!", theme=row)


@router.put("/{theme_id}", response_model=ThemeSaveResponse)
async def update_theme(
    theme_id: str,
    theme: str = Form(...),
    cover: UploadFile | None = File(None),
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
    config: AdminConfig = Depends(get_config),
) -> ThemeSaveResponse:
    """Update a theme in place.

    Without a new file and without `cover_image_url` in the payload the
    stored cover is kept.
    """
    form = _parse_theme(theme)
    if not _has_file(cover) and "cover_image_url" not in form.model_fields_set:
        stored = _stored_theme(backend, theme_id, admin.access_token)
        form = form.model_copy(update={"cover_image_url": stored.get("cover_image_url")})

    draft = await _draft(form, cover)
    saver = ThemeSaver(backend, config.storage, admin.access_token)
    row = saver.save(UpdateTheme(theme_id, draft))
    return ThemeSaveResponse(message="Tema atualizado!", theme=row)


@router.delete("/{theme_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_theme(
    theme_id: str,
    confirm: bool = False,
    admin: AdminContext = Depends(require_admin),
    backend: BackendClient = Depends(get_backend),
) -> None:
    """Delete a theme. Irreversible."""
    require_confirmation(confirm, DELETE_PROMPT)

    view = ThemeListView(backend, admin.access_token)
    if not view.delete(theme_id):
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=view.error)
