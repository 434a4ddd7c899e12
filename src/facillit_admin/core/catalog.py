"""Static catalogs for achievements.

- METRIC_CATALOG: trigger metrics an achievement can watch, each typed
  numeric or boolean.
- IconName: closed set of icon identifiers an achievement may display.

The metric type decides how a target is edited, coerced and displayed.
It is looked up here and never stored on the achievement row.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MetricType(str, Enum):
    """How a metric's target is interpreted."""

    NUMERIC = "numeric"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class MetricDefinition:
    """One entry of the metric catalog."""

    key: str
    label: str
    unit: str
    type: MetricType
    description: str

    @property
    def is_boolean(self) -> bool:
        return self.type is MetricType.BOOLEAN


METRIC_CATALOG: tuple[MetricDefinition, ...] = (
    # Numeric metrics
    MetricDefinition(
        key="study_hours",
        label="⏱️ Tempo de Estudo",
        unit="horas",
        type=MetricType.NUMERIC,
        description="Soma total de horas estudadas na plataforma.",
    ),
    MetricDefinition(
        key="courses_completed",
        label="📚 Cursos Concluídos",
        unit="cursos",
        type=MetricType.NUMERIC,
        description="Quantidade total de cursos com 100% de progresso.",
    ),
    MetricDefinition(
        key="login_streak",
        label="🔥 Ofensiva (Dias)",
        unit="dias seguidos",
        type=MetricType.NUMERIC,
        description="Dias consecutivos acessando a plataforma.",
    ),
    MetricDefinition(
        key="forum_posts",
        label="💬 Posts no Fórum",
        unit="posts",
        type=MetricType.NUMERIC,
        description="Total de interações (tópicos ou respostas) no fórum.",
    ),
    MetricDefinition(
        key="games_played",
        label="🎮 Jogos Finalizados",
        unit="partidas",
        type=MetricType.NUMERIC,
        description="Vezes que o aluno completou um jogo educacional.",
    ),
    # Boolean (status) metrics
    MetricDefinition(
        key="onboarding_completed",
        label="🏁 Completou Onboarding",
        unit="status",
        type=MetricType.BOOLEAN,
        description="Se o aluno finalizou o tour inicial de boas-vindas.",
    ),
    MetricDefinition(
        key="profile_completed",
        label="👤 Perfil Completo",
        unit="status",
        type=MetricType.BOOLEAN,
        description="Se o aluno preencheu todos os dados opcionais do perfil.",
    ),
)

_METRICS_BY_KEY: dict[str, MetricDefinition] = {m.key: m for m in METRIC_CATALOG}


def get_metric(key: str) -> MetricDefinition | None:
    """Look up a metric by key, None when it is not in the catalog."""
    return _METRICS_BY_KEY.get(key)


def metric_keys() -> list[str]:
    return [m.key for m in METRIC_CATALOG]


class IconName(str, Enum):
    """Icons an achievement can display."""

    AWARD = "Award"
    STAR = "Star"
    ZAP = "Zap"
    BOOK_OPEN = "BookOpen"
    TARGET = "Target"
    TROPHY = "Trophy"
    FLAME = "Flame"
    CROWN = "Crown"
    LIGHTBULB = "Lightbulb"
    GRADUATION_CAP = "GraduationCap"
    ROCKET = "Rocket"
    MEDAL = "Medal"
    MAP = "Map"
    FLAG = "Flag"
    CHECK_CIRCLE = "CheckCircle2"
    PUZZLE = "Puzzle"
    TIMER = "Timer"


DEFAULT_ICON = IconName.AWARD

# Explicit identifier table, built once. Keys are the stored strings.
ICON_TABLE: dict[str, IconName] = {icon.value: icon for icon in IconName}


def parse_icon(name: str) -> IconName:
    """Strict lookup used on input.

    Raises:
        ValueError: If `name` is not a known icon identifier
    """
    try:
        return ICON_TABLE[name]
    except KeyError:
        raise ValueError(f"Ícone desconhecido: '{name}'") from None


def resolve_icon(name: str | None) -> IconName:
    """Lenient lookup used when displaying rows already stored remotely."""
    if name is None:
        return DEFAULT_ICON
    return ICON_TABLE.get(name, DEFAULT_ICON)
