"""Tests for students endpoints (F6)."""

import pytest


@pytest.fixture
def students(backend):
    backend.add_row("profiles", id="s1", user_id=42, full_name="Ana Souza", nickname="aninha",
                    user_role="student", is_verified=True, address_city="Recife",
                    address_state="PE", cpf=None, selected_modules=["write"])
    backend.add_row("profiles", id="s2", user_id=7, full_name="Bruno Lima",
                    user_role="access_code_user", is_verified=False)
    return backend


class TestListStudents:
    """Tests for GET /api/students."""

    def test_list_excludes_admin_profile(self, client, admin_headers, students):
        response = client.get("/api/students", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert [s["id"] for s in data["students"]] == ["s2", "s1"]
        assert data["count"] == 2
        assert data["stats"] == {"total": 2, "verified": 1}
        assert data["status_label"] == "Todos"
        assert data["error"] is None

    def test_row_presentation(self, client, admin_headers, students):
        data = client.get("/api/students", headers=admin_headers).json()
        ana = next(s for s in data["students"] if s["id"] == "s1")
        assert ana["user_code"] == "FH000042"
        assert ana["location"] == "Recife, PE"

    def test_search_and_status(self, client, admin_headers, students):
        response = client.get(
            "/api/students",
            params={"search": "bru", "status": "unverified"},
            headers=admin_headers,
        )
        data = response.json()
        assert [s["id"] for s in data["students"]] == ["s2"]
        assert data["status"] == "unverified"
        assert data["status_label"] == "Não Verificados"
        assert data["stats"]["total"] == 2

    def test_invalid_status(self, client, admin_headers):
        response = client.get("/api/students", params={"status": "banned"}, headers=admin_headers)
        assert response.status_code == 422

    def test_read_failure_reports_error(self, client, admin_headers, students):
        students.failures["select"] = "permission denied"

        response = client.get("/api/students", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["students"] == []
        assert data["error"] == "Falha ao buscar alunos. Verifique as permissões RLS."


class TestGetStudent:
    """Tests for GET /api/students/{id}."""

    def test_detail(self, client, admin_headers, students):
        response = client.get("/api/students/s1", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["user_code"] == "FH000042"
        fields = {item["label"]: item["value"] for item in data["fields"]}
        assert fields["CPF"] == "Não preenchido"
        assert fields["Módulos Selecionados"] == "write"
        assert data["profile"]["full_name"] == "Ana Souza"

    def test_missing(self, client, admin_headers):
        response = client.get("/api/students/nope", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Aluno não encontrado."


class TestVerification:
    """Tests for POST /api/students/{id}/verification."""

    def test_requires_confirmation(self, client, admin_headers, students):
        response = client.post(
            "/api/students/s2/verification",
            json={"is_verified": True},
            headers=admin_headers,
        )

        assert response.status_code == 428
        assert response.json()["detail"] == "Tem certeza que deseja verificar este aluno?"
        assert students.calls_for("update") == []

    def test_confirmed_toggle(self, client, admin_headers, students):
        response = client.post(
            "/api/students/s2/verification?confirm=true",
            json={"is_verified": True},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"id": "s2", "is_verified": True}
        assert next(r for r in students.tables["profiles"] if r["id"] == "s2")["is_verified"] is True

    def test_remote_failure(self, client, admin_headers, students):
        students.failures["update"] = "new row violates row-level security policy"

        response = client.post(
            "/api/students/s1/verification?confirm=true",
            json={"is_verified": False},
            headers=admin_headers,
        )

        assert response.status_code == 502
        assert response.json()["detail"] == "new row violates row-level security policy"


class TestDeleteStudent:
    """Tests for DELETE /api/students/{id}."""

    def test_requires_confirmation_naming_student(self, client, admin_headers, students):
        response = client.delete("/api/students/s1", params={"name": "Ana Souza"}, headers=admin_headers)

        assert response.status_code == 428
        assert '"Ana Souza"' in response.json()["detail"]
        assert students.calls_for("delete") == []

    def test_confirmed_delete(self, client, admin_headers, students):
        response = client.delete("/api/students/s1?confirm=true", headers=admin_headers)

        assert response.status_code == 204
        assert len(students.calls_for("delete")) == 1
        assert all(r["id"] != "s1" for r in students.tables["profiles"])

    def test_failed_delete(self, client, admin_headers, students):
        students.failures["delete"] = "foreign key violation"

        response = client.delete("/api/students/s1?confirm=true", headers=admin_headers)

        assert response.status_code == 502
        assert any(r["id"] == "s1" for r in students.tables["profiles"])
