"""Student profiles: list view, search/status filter and detail presentation.

Students are `profiles` rows whose `user_role` is `student` or
`access_code_user`. Rows are created by the registration flow elsewhere.
This module only reads, toggles verification and deletes.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

import structlog

from facillit_admin.backend.client import BackendClient
from facillit_admin.core.list_view import Row, SnapshotListView

logger = structlog.get_logger(__name__)

STUDENT_ROLES = ["student", "access_code_user"]

LIST_COLUMNS = (
    "id, user_id, full_name, nickname, created_at, is_verified, "
    "address_city, address_state"
)

# Placeholders of the detail view
EMPTY_VALUE = "Não preenchido"
EMPTY_LIST = "Nenhum"
YES = "Sim"
NO = "Não"


class StudentNotFoundError(Exception):
    """Raised when a profile id does not resolve to a row."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__("Aluno não encontrado.")


class StatusFilter(str, Enum):
    """Verification filter of the students list."""

    ALL = "all"
    VERIFIED = "verified"
    UNVERIFIED = "unverified"

    @property
    def label(self) -> str:
        return {
            StatusFilter.ALL: "Todos",
            StatusFilter.VERIFIED: "Verificados",
            StatusFilter.UNVERIFIED: "Não Verificados",
        }[self]

    def matches(self, row: Row) -> bool:
        if self is StatusFilter.VERIFIED:
            return bool(row.get("is_verified"))
        if self is StatusFilter.UNVERIFIED:
            return not row.get("is_verified")
        return True


# =============================================================================
# SEARCH AND FORMATTING
# =============================================================================


def matches_search(row: Row, query: str) -> bool:
    """Case-insensitive substring match on full_name, nickname and user_id."""
    needle = query.lower()
    full_name = row.get("full_name") or ""
    nickname = row.get("nickname") or ""
    return (
        needle in full_name.lower()
        or needle in nickname.lower()
        or needle in str(row.get("user_id")).lower()
    )


def filter_students(
    rows: list[Row],
    query: str = "",
    status: StatusFilter = StatusFilter.ALL,
) -> list[Row]:
    """Derived view of the snapshot: status filter AND search.

    The input list is never modified and the result keeps its order.
    """
    return [row for row in rows if status.matches(row) and matches_search(row, query)]


def format_user_code(user_id: Any) -> str:
    """Display code of a student, e.g. 42 -> "FH000042"."""
    raw = "" if user_id is None else str(user_id)
    return "FH" + raw.rjust(6, "0")


def location_label(row: Row) -> str:
    return f"{row.get('address_city') or 'N/A'}, {row.get('address_state') or 'N/A'}"


def verification_prompt(new_state: bool) -> str:
    action = "verificar" if new_state else "remover a verificação de"
    return f"Tem certeza que deseja {action} este aluno?"


def delete_prompt(name: str | None) -> str:
    return (
        "ATENÇÃO: Isso é irreversível.\n"
        f'Tem certeza que deseja apagar o perfil de "{name or ""}"?'
    )


# =============================================================================
# LIST VIEW
# =============================================================================


class StudentListView(SnapshotListView):
    """Students list with verification toggle and delete."""

    table = "profiles"
    columns = LIST_COLUMNS
    read_error_message = "Falha ao buscar alunos. Verifique as permissões RLS."

    def _query(self) -> list[Row]:
        return self.backend.select(
            self.table,
            self.columns,
            in_={"user_role": STUDENT_ROLES},
            order_by=self.order_by,
            descending=True,
            access_token=self.access_token,
        )

    def filtered(self, query: str = "", status: StatusFilter = StatusFilter.ALL) -> list[Row]:
        return filter_students(self.rows, query, status)

    def stats(self) -> dict[str, int]:
        return {
            "total": len(self.rows),
            "verified": sum(1 for row in self.rows if row.get("is_verified")),
        }

    def set_verified(self, student_id: str, new_state: bool) -> bool:
        """Set the verification flag remotely, then patch the snapshot."""
        ok = self._run_remote(
            "student_verification",
            lambda: self.backend.update(
                self.table,
                {"is_verified": new_state},
                eq={"id": student_id},
                access_token=self.access_token,
            ),
            student_id,
        )
        if ok:
            self._patch_row(student_id, {"is_verified": new_state})
        return ok


# =============================================================================
# DETAIL
# =============================================================================


def fetch_student(backend: BackendClient, student_id: str, access_token: str | None = None) -> Row:
    """Read the full profile row.

    Raises:
        StudentNotFoundError: If no profile has this id
        BackendError: If the read fails
    """
    row = backend.select_one("profiles", "*", eq={"id": student_id}, access_token=access_token)
    if row is None:
        raise StudentNotFoundError(student_id)
    return row


def present_value(value: Any) -> str:
    """Normalize one profile field for display.

    - booleans -> "Sim" / "Não"
    - lists -> comma-joined, "Nenhum" when empty
    - None / "" -> "Não preenchido" (0 is kept)
    """
    if isinstance(value, bool):
        return YES if value else NO
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or EMPTY_LIST
    if value is None or value == "":
        return EMPTY_VALUE
    return str(value)


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_birth_date(value: str | None) -> str | None:
    if not value:
        return None
    try:
        parsed = date.fromisoformat(value[:10])
    except ValueError:
        return value
    return parsed.strftime("%d/%m/%Y")


def format_created_at(value: str | None) -> str | None:
    if not value:
        return None
    parsed = _parse_timestamp(value)
    if parsed is None:
        return value
    return parsed.strftime("%d/%m/%Y %H:%M:%S")


def present_profile(row: Row) -> list[tuple[str, str]]:
    """Labelled fields of the student record, in display order."""
    street = f"{row.get('address_street') or ''}, {row.get('address_number') or ''}"
    fields: list[tuple[str, Any]] = [
        ("Apelido", row.get("nickname")),
        ("Data de Nasc.", format_birth_date(row.get("date_of_birth"))),
        ("Pronome", row.get("pronoun")),
        ("CPF", row.get("cpf")),
        ("Nível Educacional", row.get("education_level")),
        ("Curso", row.get("course")),
        ("Ano", row.get("education_year")),
        ("Instituição", row.get("institution")),
        ("Endereço", street),
        ("Cidade", row.get("address_city")),
        ("Estado", row.get("address_state")),
        ("CEP", row.get("address_cep")),
        ("País", row.get("address_country")),
        ("Módulos Selecionados", row.get("selected_modules")),
        ("Tema", row.get("theme")),
        ("Tam. Fonte", row.get("font_size")),
        ("Data de Cadastro", format_created_at(row.get("created_at"))),
    ]
    return [(label, present_value(value)) for label, value in fields]
