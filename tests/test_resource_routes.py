"""
Интеграционные тесты REST-маршрутов ресурсов: CRUD, изоляция владельцев, лимиты тарифа и хранилища.
"""
import pytest

from extensions import db
from models import Account, Invoice
from models.user import UPLOAD_LIMIT


class TestProjectsCrud:
    """Полный цикл для /projects."""

    def test_create_list_show_update_delete(self, signup):
        client, _ = signup()

        created = client.post("/projects", json={"name": "Website", "description": "Landing"})
        assert created.status_code == 201
        record = created.get_json()["record"]
        assert record["name"] == "Website"
        assert record["user_id"]

        listing = client.get("/projects").get_json()["projects"]
        assert [item["id"] for item in listing] == [record["id"]]

        shown = client.get(f"/projects/{record['id']}")
        assert shown.get_json()["record"]["description"] == "Landing"

        updated = client.patch(f"/projects/{record['id']}", json={"name": "Website v2"})
        assert updated.status_code == 200
        assert updated.get_json()["record"]["name"] == "Website v2"

        assert client.delete(f"/projects/{record['id']}").status_code == 200
        assert client.get(f"/projects/{record['id']}").status_code == 404

    def test_dashboard_reflects_projects(self, signup):
        client, _ = signup()
        client.post("/projects", json={"name": "One"})
        data = client.get("/dashboard").get_json()
        assert data["project_count"] == 1
        assert [item["name"] for item in data["recent_projects"]] == ["One"]
        assert data["first_login"] is False

    def test_name_is_required(self, signup):
        client, _ = signup()
        response = client.post("/projects", json={"description": "no name"})
        assert response.status_code == 422
        assert "name" in response.get_json()["errors"]

    def test_update_cannot_blank_required_field(self, signup):
        client, _ = signup()
        record_id = client.post("/projects", json={"name": "Keep"}).get_json()["record"]["id"]
        response = client.put(f"/projects/{record_id}", json={"name": "   "})
        assert response.status_code == 422


class TestOwnershipIsolation:
    """Чужие записи не видны и не изменяемы."""

    def test_other_users_record_is_not_found(self, signup):
        owner, _ = signup()
        stranger, _ = signup()
        record_id = owner.post("/projects", json={"name": "Private"}).get_json()["record"]["id"]

        assert stranger.get(f"/projects/{record_id}").status_code == 404
        assert stranger.patch(f"/projects/{record_id}", json={"name": "Mine"}).status_code == 404
        assert stranger.delete(f"/projects/{record_id}").status_code == 404
        assert stranger.get("/projects").get_json()["projects"] == []

    def test_task_cannot_reference_foreign_project(self, signup):
        owner, _ = signup()
        stranger, _ = signup()
        project_id = owner.post("/projects", json={"name": "Private"}).get_json()["record"]["id"]

        response = stranger.post("/tasks", json={"title": "Sneak", "project_id": project_id})
        assert response.status_code == 422
        assert "project_id" in response.get_json()["errors"]

        own = owner.post(
            "/tasks",
            json={"title": "Plan", "project_id": project_id, "done": "true", "due_date": "2024-05-01"},
        )
        assert own.status_code == 201
        record = own.get_json()["record"]
        assert record["done"] is True
        assert record["due_date"] == "2024-05-01"

    def test_requires_authentication(self, client_factory):
        client = client_factory()
        assert client.get("/projects").status_code == 401
        assert client.post("/clients", json={"name": "ACME"}).status_code == 401


class TestPlanLimits:
    """Лимит проектов тарифа и лимит объёма загрузок."""

    def test_fourth_project_on_free_plan_is_refused(self, signup):
        client, _ = signup()
        for index in range(3):
            assert client.post("/projects", json={"name": f"P{index}"}).status_code == 201
        response = client.post("/projects", json={"name": "One too many"})
        assert response.status_code == 403
        assert response.get_json()["success"] is False

    def test_premium_plan_raises_project_limit(self, app, signup):
        client, body = signup()
        with app.app_context():
            account = db.session.get(Account, body["user"]["account_id"])
            account.plan = "premium"
            db.session.commit()
        for index in range(4):
            assert client.post("/projects", json={"name": f"P{index}"}).status_code == 201

    def test_unknown_plan_does_not_block_projects(self, app, signup):
        client, body = signup()
        with app.app_context():
            account = db.session.get(Account, body["user"]["account_id"])
            account.plan = "enterprise"
            db.session.commit()
        for index in range(4):
            assert client.post("/projects", json={"name": f"P{index}"}).status_code == 201
        limits = client.get("/dashboard").get_json()["limits"]
        assert limits == {"uploads": None, "invoices": None, "projects": None}

    def test_upload_over_quota_blocks_next_upload(self, signup):
        client, _ = signup()
        first = client.post("/uploads", json={"file_name": "huge.iso", "file_size": UPLOAD_LIMIT + 1})
        assert first.status_code == 201
        assert client.get("/dashboard").get_json()["upload_limit_reached"] is True

        second = client.post("/uploads", json={"file_name": "tiny.txt", "file_size": 1})
        assert second.status_code == 403

    def test_upload_exactly_at_quota_still_allowed(self, signup):
        client, _ = signup()
        client.post("/uploads", json={"file_name": "full.bin", "file_size": UPLOAD_LIMIT})
        assert client.post("/uploads", json={"file_name": "tiny.txt", "file_size": 1}).status_code == 201


class TestFieldValidation:
    """Разбор типов и допустимых значений."""

    def test_negative_file_size(self, signup):
        client, _ = signup()
        response = client.post("/uploads", json={"file_name": "a.txt", "file_size": -5})
        assert response.status_code == 422
        assert "file_size" in response.get_json()["errors"]

    @pytest.mark.parametrize("file_size", ["lots", True, "1.5", 1.9])
    def test_non_integer_file_size(self, signup, file_size):
        client, _ = signup()
        response = client.post("/uploads", json={"file_name": "a.txt", "file_size": file_size})
        assert response.status_code == 422

    def test_whole_float_file_size_is_accepted(self, signup):
        client, _ = signup()
        response = client.post("/uploads", json={"file_name": "a.txt", "file_size": 2048.0})
        assert response.status_code == 201
        assert response.get_json()["record"]["file_size"] == 2048

    def test_file_size_above_integer_column_range(self, signup):
        client, _ = signup()
        response = client.post("/uploads", json={"file_name": "a.txt", "file_size": 10**30})
        assert response.status_code == 422
        assert "file_size" in response.get_json()["errors"]
        assert client.get("/uploads").get_json()["uploads"] == []

    def test_issue_status_choices(self, signup):
        client, _ = signup()
        created = client.post("/issues", json={"title": "Bug"})
        assert created.get_json()["record"]["status"] == "open"

        record_id = created.get_json()["record"]["id"]
        assert client.patch(f"/issues/{record_id}", json={"status": "closed"}).status_code == 200
        rejected = client.patch(f"/issues/{record_id}", json={"status": "wontfix"})
        assert rejected.status_code == 422
        assert "status" in rejected.get_json()["errors"]

    def test_invoice_total_via_dashboard(self, app, signup):
        client, body = signup()
        client_id = client.post("/clients", json={"name": "ACME"}).get_json()["record"]["id"]
        with app.app_context():
            db.session.add(Invoice(user_id=body["user"]["id"], client_id=client_id, total=42.5))
            db.session.commit()
        assert client.get("/dashboard").get_json()["invoice_total"] == pytest.approx(42.5)


class TestShareUpload:
    """Публичная ссылка на загрузку."""

    def test_share_is_public(self, signup, client_factory):
        owner, body = signup()
        upload = owner.post(
            "/uploads",
            json={"file_name": "report.pdf", "file_size": 2048, "content_type": "application/pdf"},
        ).get_json()["record"]

        anonymous = client_factory()
        response = anonymous.get(f"/uploads/{body['user']['id']}/share/{upload['id']}")
        assert response.status_code == 200
        shared = response.get_json()["upload"]
        assert shared["file_name"] == "report.pdf"
        assert "user_id" not in shared

    def test_share_requires_matching_owner(self, signup, client_factory):
        owner, _ = signup()
        _, other = signup()
        upload_id = owner.post("/uploads", json={"file_name": "x.txt"}).get_json()["record"]["id"]
        response = client_factory().get(f"/uploads/{other['user']['id']}/share/{upload_id}")
        assert response.status_code == 404
