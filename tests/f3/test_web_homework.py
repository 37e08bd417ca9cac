"""Tests for homework endpoints (F3)."""

from proacademics.config.app_config import CONFIG_ENV, clear_config_cache
from proacademics.core.homework_importer import REQUIRED_HEADERS

IMPORT_CSV = (
    ",".join(REQUIRED_HEADERS)
    + "\n"
    + "Mathematics,GCSE,Quadratics 1,10/01/2025,Mr. Smith,17/01/2025,45,150,Q1,Algebra,Quadratics,easy,Solve,x=2,n\n"
    + "Mathematics,GCSE,Quadratics 1,10/01/2025,Mr. Smith,17/01/2025,45,150,Q2,Algebra,Quadratics,hard,Factorise,(x+1),n\n"
    + "Mathematics,GCSE,Broken row\n"
)


class TestHomeworkCrud:
    """Tests for homework CRUD."""

    def test_create(self, client, homework_payload):
        response = client.post("/api/admin/homework", json=homework_payload)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id"].startswith("hw-")
        assert data["date_assigned"] == "2025-01-10"
        assert data["total_questions"] == 1
        assert data["status"] == "draft"

    def test_create_bad_date(self, client, homework_payload):
        homework_payload["due_date"] = "whenever"

        response = client.post("/api/admin/homework", json=homework_payload)

        assert response.status_code == 422
        assert "due_date" in response.json()["error"]

    def test_get_update_delete(self, client, homework_payload):
        created = client.post("/api/admin/homework", json=homework_payload).json()["data"]
        url = f"/api/admin/homework/{created['id']}"

        assert client.get(url).json()["data"]["homework_name"] == "Quadratics 1"

        updated = client.put(url, json={"status": "active", "estimated_time": 50})
        assert updated.status_code == 200
        assert updated.json()["data"]["status"] == "active"
        assert updated.json()["data"]["estimated_time"] == 50

        assert client.delete(url).status_code == 200
        assert client.get(url).status_code == 404

    def test_update_with_no_fields(self, client, homework_payload):
        created = client.post("/api/admin/homework", json=homework_payload).json()["data"]

        response = client.put(f"/api/admin/homework/{created['id']}", json={})

        assert response.status_code == 400
        assert response.json()["error"] == "No fields to update"

    def test_update_missing(self, client):
        assert client.put("/api/admin/homework/hw-missing", json={"status": "active"}).status_code == 404


class TestHomeworkListing:
    """Tests for list, stats, filters and export."""

    def test_list_paged_and_filtered(self, client, homework_payload):
        for name, subject in (("A", "Mathematics"), ("B", "Physics"), ("C", "Mathematics")):
            client.post("/api/admin/homework", json={**homework_payload, "homework_name": name, "subject": subject})

        body = client.get("/api/admin/homework", params={"limit": 2}).json()["data"]
        assert body["total"] == 3
        assert body["total_pages"] == 2
        assert [h["homework_name"] for h in body["items"]] == ["C", "B"]

        maths = client.get("/api/admin/homework", params={"subject": "Mathematics", "status": "draft"}).json()
        assert maths["data"]["total"] == 2

    def test_stats_and_filters(self, client, homework_payload):
        client.post("/api/admin/homework", json=homework_payload)

        stats = client.get("/api/admin/homework/stats").json()["data"]
        assert stats["total"] == 1
        assert stats["by_level"] == [{"level": "medium", "count": 1}]

        assert client.get("/api/admin/homework/filters/subjects").json()["data"] == ["Mathematics"]
        assert client.get("/api/admin/homework/filters/teachers").json()["data"] == ["Mr. Smith"]
        programs = client.get("/api/admin/homework/filters/programs", params={"subject": "Physics"})
        assert programs.json()["data"] == []

    def test_export(self, client, homework_payload):
        client.post("/api/admin/homework", json=homework_payload)

        response = client.get("/api/admin/homework/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="homework_' in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0].startswith('"Homework Name","Subject"')
        assert lines[1].startswith('"Quadratics 1","Mathematics"')


class TestHomeworkImport:
    """Tests for POST /api/admin/homework/import."""

    def test_import_csv(self, client):
        response = client.post(
            "/api/admin/homework/import",
            files={"file": ("homework.csv", IMPORT_CSV, "text/csv")},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["inserted_count"] == 1
        assert data["valid_rows"] == 2
        assert data["invalid_rows"] == ["Row 4: Column count mismatch"]
        assert data["total_homework"] == 1

        listed = client.get("/api/admin/homework").json()["data"]["items"]
        assert listed[0]["total_questions"] == 2

    def test_import_without_file(self, client):
        response = client.post("/api/admin/homework/import")

        assert response.status_code == 400
        assert response.json()["error"] == "No file provided"

    def test_import_missing_columns(self, client):
        response = client.post(
            "/api/admin/homework/import",
            files={"file": ("homework.csv", "Subject,Program\nMaths,GCSE\n", "text/csv")},
        )

        assert response.status_code == 400
        assert response.json()["error"].startswith("Missing required columns")
        assert "Found columns: Subject, Program" in response.json()["error"]

    def test_import_too_large(self, client, tmp_path, monkeypatch):
        config_file = tmp_path / "admin.yaml"
        config_file.write_text("api:\n  max_upload_bytes: 64\n")
        monkeypatch.setenv(CONFIG_ENV, str(config_file))
        clear_config_cache()

        response = client.post(
            "/api/admin/homework/import",
            files={"file": ("homework.csv", IMPORT_CSV, "text/csv")},
        )

        assert response.status_code == 413
        assert response.json() == {"success": False, "error": "File is larger than 64 bytes"}
        assert client.get("/api/admin/homework").json()["data"]["total"] == 0
