"""Writing themes: guiding-text blocks, cover image, save and list.

A theme carries an ordered list of guiding blocks. Each block is either
a text passage or an image with a caption. The cover image can come from
a freshly chosen local file, uploaded on save. Until then the draft only
holds a local preview, which is never persisted.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Literal, Union

import structlog

from facillit_admin.backend.client import BackendClient
from facillit_admin.config.app_config import StorageConfig
from facillit_admin.core.forms import FormValidationError, is_blank
from facillit_admin.core.list_view import Row, SnapshotListView

logger = structlog.get_logger(__name__)

TABLE = "write_themes"

CATEGORY_SUGGESTIONS = ["Atualidades", "Filosofia", "Ciência", "Educação", "Social"]
DEFAULT_CATEGORY = "Atualidades"

DELETE_PROMPT = "Tem certeza que deseja deletar este tema? Esta ação não pode ser desfeita."


class Difficulty(str, Enum):
    """Ordered difficulty levels."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @property
    def label(self) -> str:
        return {
            Difficulty.EASY: "Fácil",
            Difficulty.MEDIUM: "Médio",
            Difficulty.HARD: "Difícil",
        }[self]

    @property
    def rank(self) -> int:
        return list(Difficulty).index(self)


class ThemeNotFoundError(Exception):
    """Raised when a theme id does not resolve to a row."""

    def __init__(self, theme_id: str):
        self.theme_id = theme_id
        super().__init__("Tema não encontrado.")


# =============================================================================
# GUIDING BLOCKS
# =============================================================================


@dataclass
class TextBlock:
    content: str = ""
    type: Literal["text"] = "text"

    def to_dict(self) -> dict[str, Any]:
        return {"type": "text", "content": self.content}


@dataclass
class ImageBlock:
    url: str = ""
    caption: str = ""
    type: Literal["image"] = "image"

    def to_dict(self) -> dict[str, Any]:
        return {"type": "image", "url": self.url, "caption": self.caption}


GuidingBlock = Union[TextBlock, ImageBlock]

_EDITABLE_FIELDS = {"text": ("content",), "image": ("url", "caption")}


def block_from_dict(data: dict[str, Any]) -> GuidingBlock:
    """Parse one stored block.

    Raises:
        ValueError: If the block type is neither "text" nor "image"
    """
    kind = data.get("type")
    if kind == "text":
        return TextBlock(content=data.get("content") or "")
    if kind == "image":
        return ImageBlock(url=data.get("url") or "", caption=data.get("caption") or "")
    raise ValueError(f"Tipo de bloco desconhecido: {kind!r}")


def new_block(kind: Literal["text", "image"]) -> GuidingBlock:
    if kind == "text":
        return TextBlock()
    if kind == "image":
        return ImageBlock()
    raise ValueError(f"Tipo de bloco desconhecido: {kind!r}")


# =============================================================================
# COVER IMAGE
# =============================================================================


@dataclass
class CoverFile:
    """A local file chosen as the new cover."""

    file_name: str
    data: bytes
    content_type: str = "image/png"

    def preview_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass
class CoverImage:
    """Persisted cover URL plus an optional pending replacement."""

    persisted_url: str | None = None
    pending_file: CoverFile | None = None

    @property
    def preview_url(self) -> str | None:
        """What the editor shows: the pending preview, else the persisted URL."""
        if self.pending_file is not None:
            return self.pending_file.preview_url()
        return self.persisted_url

    def choose(self, file: CoverFile) -> str:
        self.pending_file = file
        return file.preview_url()


# =============================================================================
# DRAFT
# =============================================================================


@dataclass
class ThemeDraft:
    """A theme being created or edited."""

    title: str = ""
    description: str = ""
    category: str = DEFAULT_CATEGORY
    difficulty: Difficulty = Difficulty.MEDIUM
    structure_model: str | None = None
    guiding_texts: list[GuidingBlock] = field(default_factory=lambda: [TextBlock()])
    cover: CoverImage = field(default_factory=CoverImage)

    @classmethod
    def from_row(cls, row: Row) -> ThemeDraft:
        return cls(
            title=row.get("title") or "",
            description=row.get("description") or "",
            category=row.get("category") or DEFAULT_CATEGORY,
            difficulty=Difficulty(row.get("difficulty") or Difficulty.MEDIUM.value),
            structure_model=row.get("structure_model"),
            guiding_texts=[block_from_dict(b) for b in row.get("guiding_texts") or []],
            cover=CoverImage(persisted_url=row.get("cover_image_url")),
        )

    def add_block(self, kind: Literal["text", "image"]) -> int:
        """Append an empty block. Returns its index."""
        self.guiding_texts.append(new_block(kind))
        return len(self.guiding_texts) - 1

    def update_block(self, index: int, field_name: str, value: str) -> None:
        """Edit one field of one block.

        Raises:
            IndexError: If there is no block at `index`
            ValueError: If the block variant has no such field
        """
        block = self.guiding_texts[index]
        if field_name not in _EDITABLE_FIELDS[block.type]:
            raise ValueError(f"Bloco '{block.type}' não possui o campo '{field_name}'")
        setattr(block, field_name, value)

    def remove_block(self, index: int) -> None:
        del self.guiding_texts[index]

    def choose_cover(self, file: CoverFile) -> str:
        return self.cover.choose(file)

    def to_row(self, cover_image_url: str | None) -> dict[str, Any]:
        """Row to persist, with the final cover URL supplied by the saver."""
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "difficulty": self.difficulty.value,
            "structure_model": self.structure_model,
            "cover_image_url": cover_image_url,
            "guiding_texts": [block.to_dict() for block in self.guiding_texts],
        }


# =============================================================================
# SAVE
# =============================================================================


@dataclass
class CreateTheme:
    draft: ThemeDraft


@dataclass
class UpdateTheme:
    theme_id: str
    draft: ThemeDraft


SaveTheme = Union[CreateTheme, UpdateTheme]


def cover_path(prefix: str, file_name: str, now_ms: int) -> str:
    """Storage path of a cover: "{prefix}/{epoch_ms}_{file_name}"."""
    return f"{prefix}/{now_ms}_{file_name}"


class ThemeSaver:
    """Uploads a pending cover (if any) and then creates or updates the theme."""

    def __init__(
        self,
        backend: BackendClient,
        storage: StorageConfig | None = None,
        access_token: str | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.backend = backend
        self.storage = storage or StorageConfig()
        self.access_token = access_token
        self._clock = clock

    def _final_cover_url(self, draft: ThemeDraft) -> str | None:
        pending = draft.cover.pending_file
        if pending is None:
            return draft.cover.persisted_url

        path = cover_path(self.storage.cover_prefix, pending.file_name, int(self._clock() * 1000))
        stored_path = self.backend.upload(
            self.storage.bucket,
            path,
            pending.data,
            content_type=pending.content_type,
            upsert=True,
            access_token=self.access_token,
        )
        return self.backend.public_url(self.storage.bucket, stored_path)

    def save(self, command: SaveTheme) -> dict[str, Any]:
        """Persist a theme.

        Returns:
            The row that was sent to the backend

        Raises:
            FormValidationError: If the title is empty (nothing sent)
            BackendError: If the upload or the table write fails
        """
        draft = command.draft
        if is_blank(draft.title):
            raise FormValidationError("O título do tema é obrigatório.")

        row = draft.to_row(self._final_cover_url(draft))

        if isinstance(command, UpdateTheme):
            self.backend.update(
                TABLE, row, eq={"id": command.theme_id}, access_token=self.access_token
            )
            logger.info("theme_updated", theme_id=command.theme_id)
        else:
            self.backend.insert(TABLE, row, access_token=self.access_token)
            logger.info("theme_created", title=draft.title)

        # Persisted now: the pending file is no longer pending
        draft.cover = CoverImage(persisted_url=row["cover_image_url"])
        return row


def fetch_theme(backend: BackendClient, theme_id: str, access_token: str | None = None) -> Row:
    """Read one full theme row.

    Raises:
        ThemeNotFoundError: If no theme has this id
        BackendError: If the read fails
    """
    row = backend.select_one(TABLE, "*", eq={"id": theme_id}, access_token=access_token)
    if row is None:
        raise ThemeNotFoundError(theme_id)
    return row


# =============================================================================
# LIST VIEW
# =============================================================================


class ThemeListView(SnapshotListView):
    """Writing themes, newest first."""

    table = TABLE
    columns = "id, title, category, difficulty, created_at"
    read_error_message = "Falha ao buscar temas."

    def labelled_rows(self) -> list[Row]:
        rows = []
        for row in self.rows:
            try:
                label = Difficulty(row.get("difficulty")).label
            except ValueError:
                label = str(row.get("difficulty") or "")
            rows.append({**row, "title": row.get("title") or "", "difficulty_label": label})
        return rows
