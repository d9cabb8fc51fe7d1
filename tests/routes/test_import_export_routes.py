"""Tests for the import/export API routes."""

import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text
from sqlalchemy.orm import Session

from celestask_svc.api.app import app
from celestask_svc.database import create_engine_and_session_factory, get_db, init_db
from celestask_svc.services.manifest import EXPORT_VERSION, TABLE_ORDER
from celestask_svc.services.schema_introspector import SchemaIntrospector


class TestExportEndpoint:
    """Test cases for GET /api/export."""

    def test_export_download(self, client: TestClient, seeded_session: Session):
        response = client.get("/api/export")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="celestask-export-')
        assert disposition.endswith('.json"')

        body = response.json()
        assert body["version"] == EXPORT_VERSION
        assert "exportedAt" in body
        assert list(body["data"]) == list(TABLE_ORDER)
        assert len(body["data"]["projects"]) == 2
        assert len(body["data"]["tasks"]) == 2

    def test_export_failure_returns_500(self, client: TestClient, db_session: Session):
        db_session.execute(text("DROP TABLE notes"))
        db_session.commit()

        response = client.get("/api/export")

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "EXPORT_ERROR"


class TestExportStatusEndpoint:
    """Test cases for GET /api/export/status."""

    def test_status_reports_counts_and_manifest(self, client: TestClient, seeded_session: Session):
        response = client.get("/api/export/status")

        assert response.status_code == 200
        body = response.json()
        assert body["version"] == EXPORT_VERSION
        assert body["tableStats"]["projects"] == 2
        assert body["tableStats"]["saved_views"] == 0
        assert body["totalRecords"] == 7
        assert body["supportedTables"] == list(TABLE_ORDER)


class TestExportSqliteEndpoint:
    """Test cases for GET /api/export/sqlite."""

    def test_in_memory_store_has_no_file(self, client: TestClient):
        response = client.get("/api/export/sqlite")

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "DATABASE_NOT_FOUND"

    def test_file_store_is_streamed(self, tmp_path):
        """Test that a file-backed store is sent as a binary attachment."""
        engine, session_factory = create_engine_and_session_factory(
            f"sqlite:///{tmp_path / 'celestask.db'}"
        )
        init_db(engine)
        session = session_factory()

        def override_get_db():
            yield session

        app.dependency_overrides[get_db] = override_get_db
        try:
            with TestClient(app) as test_client:
                response = test_client.get("/api/export/sqlite")
        finally:
            app.dependency_overrides.clear()
            session.close()
            engine.dispose()

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/octet-stream"
        assert "celestask-backup-" in response.headers["content-disposition"]
        assert response.content.startswith(b"SQLite format 3")


class TestImportEndpoint:
    """Test cases for POST /api/import."""

    def test_invalid_mode_returns_400(self, client: TestClient, seeded_session: Session):
        response = client.post(
            "/api/import?mode=delete-everything",
            json={"data": {"projects": []}}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "code": "INVALID_MODE",
            "message": "Mode must be 'merge' or 'replace'"
        }
        assert client.get("/api/export/status").json()["totalRecords"] == 7

    @pytest.mark.parametrize("body", [[1, 2], {"data": None}, {"data": {"timers": []}}])
    def test_invalid_payload_returns_400(self, client: TestClient, body):
        response = client.post("/api/import", json=body)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PAYLOAD"

    def test_missing_body_returns_400(self, client: TestClient):
        response = client.post("/api/import")

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_PAYLOAD"

    def test_round_trip_in_replace_mode(self, client: TestClient, seeded_session: Session):
        exported = client.get("/api/export").json()

        response = client.post("/api/import?mode=replace", json=exported)

        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "replace"
        assert body["totals"] == {"imported": 7, "skipped": 0, "errors": 0}
        assert "importedAt" in body
        assert "errorDetails" not in body
        assert "totalErrors" not in body
        assert client.get("/api/export/status").json()["totalRecords"] == 7

    def test_defaults_to_merge(self, client: TestClient):
        response = client.post("/api/import", json={"data": {"projects": [{"id": 1, "name": "P"}]}})

        assert response.status_code == 200
        assert response.json()["mode"] == "merge"

    def test_row_errors_still_return_200(self, client: TestClient, seeded_session: Session):
        payload = {
            "version": "1.5.0",
            "data": {
                "tasks": [
                    {"id": 50, "project_id": 1, "title": "Fine"},
                    {"id": 51, "project_id": 1, "title": None},
                ]
            }
        }

        response = client.post("/api/import?mode=merge", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body["summary"]["tasks"] == {"imported": 1, "skipped": 0, "errors": 1}
        assert body["totalErrors"] == 1
        assert body["errorDetails"][0]["table"] == "tasks"
        assert body["errorDetails"][0]["rowId"] == 51
        assert body["sourceVersion"] == "1.5.0"

    def test_numeric_version_returns_200(self, client: TestClient, seeded_session: Session):
        """Test that committed rows are reported as a success whatever the version type."""
        payload = {"version": 1.6, "data": {"projects": [{"id": 3, "name": "Ops"}]}}

        response = client.post("/api/import?mode=merge", json=payload)

        assert response.status_code == 200
        assert response.json()["sourceVersion"] == "1.6"
        assert client.get("/api/export/status").json()["totalRecords"] == 8

    def test_transaction_failure_returns_500(
        self, client: TestClient, seeded_session: Session, monkeypatch, caplog
    ):
        def broken(self, table_name):
            raise RuntimeError("introspection broke")

        monkeypatch.setattr(SchemaIntrospector, "get_column_names", broken)

        with caplog.at_level(logging.ERROR, logger="celestask_svc.routes.import_export_routes"):
            response = client.post("/api/import?mode=replace", json={"data": {"projects": [{"id": 7}]}})

        assert response.status_code == 500
        assert response.json()["detail"]["code"] == "IMPORT_FAILED"
        route_records = [r for r in caplog.records if r.name == "celestask_svc.routes.import_export_routes"]
        assert route_records and route_records[-1].exc_info is not None
        monkeypatch.undo()
        assert client.get("/api/export/status").json()["totalRecords"] == 7
