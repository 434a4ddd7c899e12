"""Pydantic schemas for the admin Web API.

Serialization models for dashboard, students, achievements and themes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from facillit_admin.core.catalog import IconName, METRIC_CATALOG
from facillit_admin.core.students import StatusFilter
from facillit_admin.core.themes import DEFAULT_CATEGORY, Difficulty


# =============================================================================
# DASHBOARD SCHEMAS
# =============================================================================


class DashboardResponse(BaseModel):
    """Headline counts of the dashboard home."""

    total_students: int
    total_schools: int
    error: str | None = None


# =============================================================================
# STUDENT SCHEMAS
# =============================================================================


class StudentSummary(BaseModel):
    """One row of the students list."""

    id: str
    user_id: int | None = None
    user_code: str
    full_name: str | None = None
    nickname: str | None = None
    location: str
    is_verified: bool = False
    created_at: str | None = None


class StudentStats(BaseModel):
    total: int
    verified: int


class StudentListResponse(BaseModel):
    """Filtered students list plus stats over the full snapshot."""

    students: list[StudentSummary]
    count: int
    stats: StudentStats
    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    status_label: str = StatusFilter.ALL.label
    error: str | None = None


class InfoItem(BaseModel):
    label: str
    value: str


class StudentDetailResponse(BaseModel):
    """Full student record with display-ready fields."""

    id: str
    user_code: str
    full_name: str | None = None
    is_verified: bool = False
    fields: list[InfoItem]
    profile: dict[str, Any]


class VerificationRequest(BaseModel):
    is_verified: bool


class VerificationResponse(BaseModel):
    id: str
    is_verified: bool


# =============================================================================
# ACHIEVEMENT SCHEMAS
# =============================================================================


class AchievementFormSchema(BaseModel):
    """Request body for creating or updating an achievement.

    Title/description emptiness is checked by the editor so the console
    gets its own message rather than a schema error.
    """

    title: str = ""
    description: str = ""
    icon_name: IconName = IconName.AWARD
    metric_name: str = Field(default=METRIC_CATALOG[0].key)
    metric_target: int = 10
    is_active: bool = True


class AchievementResponse(BaseModel):
    """One achievement definition with display labels."""

    id: int
    title: str
    description: str
    icon_name: str | None = None
    icon: str
    metric_name: str | None = None
    metric_target: int | None = None
    target_label: str
    is_active: bool
    status_label: str
    created_at: str | None = None


class AchievementListResponse(BaseModel):
    achievements: list[AchievementResponse]
    count: int
    error: str | None = None


class TargetInputResponse(BaseModel):
    kind: Literal["binary", "bounded_int"]
    unit: str
    minimum: int | None = None
    options: list[int] = Field(default_factory=list)


class MetricResponse(BaseModel):
    key: str
    label: str
    unit: str
    type: str
    description: str
    target_input: TargetInputResponse


class CatalogResponse(BaseModel):
    """Everything the achievement editor needs to render."""

    metrics: list[MetricResponse]
    icons: list[str]
    default_form: AchievementFormSchema


class AchievementEditResponse(BaseModel):
    """A stored definition as the edit form, with its target widget."""

    id: int
    form: AchievementFormSchema
    target_input: TargetInputResponse | None = None


class SaveResponse(BaseModel):
    message: str


# =============================================================================
# THEME SCHEMAS
# =============================================================================


class TextBlockSchema(BaseModel):
    type: Literal["text"] = "text"
    content: str = ""


class ImageBlockSchema(BaseModel):
    type: Literal["image"] = "image"
    url: str = ""
    caption: str = ""


GuidingTextSchema = Annotated[
    Union[TextBlockSchema, ImageBlockSchema],
    Field(discriminator="type"),
]


class ThemeFormSchema(BaseModel):
    """Theme fields sent by the editor (multipart field `theme`, JSON)."""

    id: str | None = None
    title: str = ""
    description: str = ""
    category: str = DEFAULT_CATEGORY
    difficulty: Difficulty = Difficulty.MEDIUM
    structure_model: str | None = None
    cover_image_url: str | None = None
    guiding_texts: list[GuidingTextSchema] = Field(
        default_factory=lambda: [TextBlockSchema()]
    )


class ThemeSummary(BaseModel):
    id: str
    title: str
    category: str | None = None
    difficulty: str | None = None
    difficulty_label: str
    created_at: str | None = None


class ThemeListResponse(BaseModel):
    """Themes list plus the category suggestions of the editor."""

    themes: list[ThemeSummary]
    count: int
    categories: list[str] = Field(default_factory=list)
    error: str | None = None


class ThemeResponse(ThemeFormSchema):
    """A stored theme, as loaded by the edit screen."""

    created_at: str | None = None


class ThemeSaveResponse(BaseModel):
    message: str
    theme: dict[str, Any]


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
