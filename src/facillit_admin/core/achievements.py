"""Achievement ("conquista") definitions: list, editor and display labels.

The metric chosen for an achievement decides how its target behaves:
- numeric metrics take a positive integer (e.g. 7 "dias seguidos")
- boolean metrics take 0 or 1; on save any truthy target becomes 1

The metric type comes from METRIC_CATALOG at every use.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Union

import structlog

from facillit_admin.backend.client import BackendClient
from facillit_admin.core.catalog import (
    DEFAULT_ICON,
    METRIC_CATALOG,
    IconName,
    MetricDefinition,
    get_metric,
    resolve_icon,
)
from facillit_admin.core.forms import FormValidationError, is_blank
from facillit_admin.core.list_view import Row, SnapshotListView

logger = structlog.get_logger(__name__)

TABLE = "conquistas"

DELETE_PROMPT = (
    "Tem certeza? A definição será apagada, mas usuários que já ganharam "
    "manterão o registro."
)
REQUIRED_FIELDS_MESSAGE = "Título e descrição são obrigatórios."
TARGET_MINIMUM = 1


class AchievementNotFoundError(Exception):
    """Raised when an achievement id does not resolve to a row."""

    def __init__(self, achievement_id: int):
        self.achievement_id = achievement_id
        super().__init__("Conquista não encontrada.")


# =============================================================================
# TARGET INPUT
# =============================================================================


@dataclass(frozen=True)
class TargetInput:
    """Which widget edits the target for the selected metric."""

    kind: Literal["binary", "bounded_int"]
    unit: str
    minimum: int | None = None
    options: tuple[int, ...] = ()


def target_input_for(metric: MetricDefinition) -> TargetInput:
    if metric.is_boolean:
        return TargetInput(kind="binary", unit=metric.unit, options=(0, 1))
    return TargetInput(kind="bounded_int", unit=metric.unit, minimum=TARGET_MINIMUM)


def coerce_target(metric: MetricDefinition | None, raw_target: int) -> int:
    """Boolean metrics store exactly 0 or 1; numeric targets pass through."""
    if metric is not None and metric.is_boolean:
        return 1 if raw_target else 0
    return raw_target


def target_label(row: Row) -> str:
    """Display string of a stored target.

    Examples:
        login_streak, 7 -> "7 dias seguidos"
        profile_completed, 1 -> "Sim (Concluído)"
    """
    metric = get_metric(row.get("metric_name") or "")
    target = row.get("metric_target")
    if metric is not None and metric.is_boolean:
        return "Sim (Concluído)" if target == 1 else "Não"
    if target is None:
        return "N/A"
    unit = metric.unit if metric is not None else ""
    return f"{target} {unit}"


def status_label(is_active: bool) -> str:
    return "Ativa" if is_active else "Rascunho"


# =============================================================================
# FORM
# =============================================================================


@dataclass
class AchievementForm:
    """Editable fields of one achievement definition."""

    title: str = ""
    description: str = ""
    icon_name: IconName = DEFAULT_ICON
    metric_name: str = field(default_factory=lambda: METRIC_CATALOG[0].key)
    metric_target: int = 10
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Row) -> AchievementForm:
        """Form pre-filled from a stored row (edit mode)."""
        return cls(
            title=row.get("title") or "",
            description=row.get("description") or "",
            icon_name=resolve_icon(row.get("icon_name")),
            metric_name=row.get("metric_name") or METRIC_CATALOG[0].key,
            metric_target=int(row.get("metric_target") or 0),
            is_active=bool(row.get("is_active", True)),
        )

    @property
    def metric(self) -> MetricDefinition | None:
        return get_metric(self.metric_name)

    def select_metric(self, key: str) -> TargetInput:
        """Switch the metric and return the widget for its target.

        Raises:
            FormValidationError: If `key` is not in the catalog
        """
        metric = get_metric(key)
        if metric is None:
            raise FormValidationError(f"Métrica desconhecida: '{key}'")
        self.metric_name = key
        return target_input_for(metric)

    def target_input(self) -> TargetInput | None:
        metric = self.metric
        return target_input_for(metric) if metric is not None else None

    def prepare_payload(self) -> dict[str, Any]:
        """Validate and build the row to persist.

        Raises:
            FormValidationError: On empty title/description, unknown metric
                or a numeric target below the minimum
        """
        if is_blank(self.title) or is_blank(self.description):
            raise FormValidationError(REQUIRED_FIELDS_MESSAGE)

        metric = self.metric
        if metric is None:
            raise FormValidationError(f"Métrica desconhecida: '{self.metric_name}'")

        target = coerce_target(metric, self.metric_target)
        if not metric.is_boolean and target < TARGET_MINIMUM:
            raise FormValidationError(f"A meta deve ser no mínimo {TARGET_MINIMUM}.")

        payload = asdict(self)
        payload["icon_name"] = self.icon_name.value
        payload["metric_target"] = target
        return payload


# =============================================================================
# SAVE COMMANDS
# =============================================================================


@dataclass
class CreateAchievement:
    form: AchievementForm


@dataclass
class UpdateAchievement:
    achievement_id: int
    form: AchievementForm


SaveAchievement = Union[CreateAchievement, UpdateAchievement]


class AchievementEditor:
    """Persists achievement forms through the backend."""

    def __init__(self, backend: BackendClient, access_token: str | None = None):
        self.backend = backend
        self.access_token = access_token

    def create(self, command: CreateAchievement) -> str:
        payload = command.form.prepare_payload()
        self.backend.insert(TABLE, payload, access_token=self.access_token)
        logger.info("achievement_created", title=payload["title"], metric=payload["metric_name"])
        return "Conquista criada!"

    def update(self, command: UpdateAchievement) -> str:
        payload = command.form.prepare_payload()
        self.backend.update(
            TABLE,
            payload,
            eq={"id": command.achievement_id},
            access_token=self.access_token,
        )
        logger.info("achievement_updated", achievement_id=command.achievement_id)
        return "Conquista atualizada!"

    def save(self, command: SaveAchievement) -> str:
        """Dispatch a save command.

        Returns:
            Success message for the console

        Raises:
            FormValidationError: Local validation failed (nothing sent)
            BackendError: The remote call failed
        """
        if isinstance(command, UpdateAchievement):
            return self.update(command)
        return self.create(command)


def fetch_achievement(
    backend: BackendClient, achievement_id: int, access_token: str | None = None
) -> Row:
    """Read one definition for the edit screen.

    Raises:
        AchievementNotFoundError: If no definition has this id
        BackendError: If the read fails
    """
    row = backend.select_one(TABLE, "*", eq={"id": achievement_id}, access_token=access_token)
    if row is None:
        raise AchievementNotFoundError(achievement_id)
    return row


# =============================================================================
# LIST VIEW
# =============================================================================


class AchievementListView(SnapshotListView):
    """Achievement definitions, newest first."""

    table = TABLE
    columns = "*"
    read_error_message = "Falha ao buscar conquistas."

    def labelled_rows(self) -> list[Row]:
        """Snapshot rows plus their display labels."""
        return [
            {
                **row,
                "title": row.get("title") or "",
                "description": row.get("description") or "",
                "is_active": bool(row.get("is_active")),
                "icon": resolve_icon(row.get("icon_name")).value,
                "target_label": target_label(row),
                "status_label": status_label(bool(row.get("is_active"))),
            }
            for row in self.rows
        ]

    def delete(self, row_id: Any) -> bool:
        """Delete a definition and re-read the list.

        Awards already granted live in another system and are left alone.
        """
        self.clear_messages()
        if not super().delete(row_id):
            self.error = "Erro ao apagar."
            return False
        self.success = "Conquista removida."
        self.load()
        return True
