"""Tests for saving, fetching and listing themes (F5)."""

import pytest

from facillit_admin.backend.client import BackendError
from facillit_admin.config.app_config import StorageConfig
from facillit_admin.core.forms import FormValidationError
from facillit_admin.core.themes import (
    CoverFile,
    CreateTheme,
    ThemeDraft,
    ThemeListView,
    ThemeNotFoundError,
    ThemeSaver,
    UpdateTheme,
    fetch_theme,
)

FROZEN_SECONDS = 1700000000.123


@pytest.fixture
def saver(backend):
    return ThemeSaver(backend, StorageConfig(), access_token="tok", clock=lambda: FROZEN_SECONDS)


@pytest.fixture
def stored(backend):
    return backend.add_row(
        "write_themes",
        title="Antigo",
        description="",
        category="Atualidades",
        difficulty="easy",
        structure_model=None,
        cover_image_url="https://x/old.png",
        guiding_texts=[{"type": "text", "content": "I"}],
    )


class TestCreate:
    """Tests for creating themes."""

    def test_create_without_cover(self, backend, saver):
        row = saver.save(CreateTheme(ThemeDraft(title="Mobilidade urbana")))

        assert row["cover_image_url"] is None
        assert backend.calls_for("upload") == []
        assert backend.tables["write_themes"][0]["title"] == "Mobilidade urbana"

    def test_blank_title_sends_nothing(self, backend, saver):
        with pytest.raises(FormValidationError, match="O título do tema é obrigatório."):
            saver.save(CreateTheme(ThemeDraft(title="  ")))
        assert backend.calls == []

    def test_new_cover_uploaded_then_public_url_persisted(self, backend, saver):
        draft = ThemeDraft(title="Com capa")
        draft.choose_cover(CoverFile("capa.png", b"img", "image/png"))

        row = saver.save(CreateTheme(draft))

        (upload,) = backend.calls_for("upload")
        assert upload[1] == "theme_images"
        assert upload[2]["path"] == "theme_covers/1700000000123_capa.png"
        assert upload[2]["upsert"] is True
        assert upload[2]["access_token"] == "tok"
        expected = (
            "https://test.supabase.co/storage/v1/object/public/"
            "theme_images/theme_covers/1700000000123_capa.png"
        )
        assert row["cover_image_url"] == expected
        assert draft.cover.pending_file is None
        assert draft.cover.persisted_url == expected

    def test_upload_before_insert(self, backend, saver):
        draft = ThemeDraft(title="Ordem")
        draft.choose_cover(CoverFile("a.png", b"x"))

        saver.save(CreateTheme(draft))

        operations = [c[0] for c in backend.calls]
        assert operations.index("upload") < operations.index("insert")

    def test_upload_failure_aborts_save(self, backend, saver):
        backend.failures["upload"] = "Payload too large"
        draft = ThemeDraft(title="Grande")
        draft.choose_cover(CoverFile("a.png", b"x"))

        with pytest.raises(BackendError, match="Payload too large"):
            saver.save(CreateTheme(draft))

        assert backend.tables["write_themes"] == []
        assert draft.cover.pending_file is not None


class TestUpdate:
    """Tests for updating themes."""

    def test_update_without_new_cover_keeps_url(self, backend, saver, stored):
        draft = ThemeDraft.from_row(stored)
        draft.title = "Renomeado"

        row = saver.save(UpdateTheme(stored["id"], draft))

        assert row["cover_image_url"] == "https://x/old.png"
        assert backend.tables["write_themes"][0]["title"] == "Renomeado"
        (update,) = backend.calls_for("update")
        assert update[2]["eq"] == {"id": stored["id"]}
        assert backend.calls_for("upload") == []

    def test_update_failure_propagates(self, backend, saver, stored):
        backend.failures["update"] = "permission denied"
        with pytest.raises(BackendError):
            saver.save(UpdateTheme(stored["id"], ThemeDraft.from_row(stored)))


class TestFetchAndList:
    """Tests for fetch_theme and ThemeListView."""

    def test_fetch_theme(self, backend, stored):
        assert fetch_theme(backend, stored["id"])["title"] == "Antigo"

    def test_fetch_missing_theme(self, backend):
        with pytest.raises(ThemeNotFoundError, match="Tema não encontrado."):
            fetch_theme(backend, 999)

    def test_list_projection_and_labels(self, backend, stored):
        view = ThemeListView(backend)
        view.load()

        (row,) = view.labelled_rows()
        assert set(row) == {"id", "title", "category", "difficulty", "created_at", "difficulty_label"}
        assert row["difficulty_label"] == "Fácil"

    def test_unknown_difficulty_label_is_raw(self, backend):
        backend.add_row("write_themes", title="X", category="C", difficulty="extreme")
        view = ThemeListView(backend)
        view.load()
        assert view.labelled_rows()[0]["difficulty_label"] == "extreme"

    def test_delete_removes_row(self, backend, stored):
        view = ThemeListView(backend)
        view.load()

        assert view.delete(stored["id"])
        assert view.rows == []
        assert backend.tables["write_themes"] == []
