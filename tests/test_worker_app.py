"""
Worker 服务测试（FastAPI TestClient）
"""

import pytest
from fastapi.testclient import TestClient

from worker.app import create_app


@pytest.fixture
def client(tmp_path):
    app = create_app("node1", service_name="WorkerService", default_cwd=str(tmp_path))
    with TestClient(app) as client:
        yield client


class TestExecuteEndpoint:
    def test_success(self, client, tmp_path):
        response = client.post("/WorkerService/execute", json={"command": "echo hi > out.txt; echo done"})

        assert response.status_code == 200
        body = response.json()
        assert body["exit_code"] == 0
        assert body["stdout"].strip() == "done"
        assert body["hostname"] == "node1"
        assert (tmp_path / "out.txt").read_text().strip() == "hi"

    def test_failure_returns_exit_code_and_stderr(self, client):
        response = client.post("/WorkerService/execute", json={"command": "echo oops >&2; exit 4"})

        body = response.json()
        assert response.status_code == 200
        assert body["exit_code"] == 4
        assert "oops" in body["stderr"]

    def test_explicit_cwd(self, client, tmp_path):
        sub = tmp_path / "sub"
        sub.mkdir()
        response = client.post("/WorkerService/execute", json={"command": "pwd", "cwd": str(sub)})
        assert response.json()["stdout"].strip() == str(sub)

    def test_missing_cwd(self, client, tmp_path):
        response = client.post(
            "/WorkerService/execute", json={"command": "true", "cwd": str(tmp_path / "nope")}
        )
        assert response.status_code == 400

    def test_empty_command_rejected(self, client):
        response = client.post("/WorkerService/execute", json={"command": ""})
        assert response.status_code == 422

    def test_unknown_service(self, client):
        response = client.post("/Other/execute", json={"command": "true"})
        assert response.status_code == 404


class TestHealth:
    def test_health(self, client):
        body = client.get("/health").json()
        assert body == {
            "status": "ok",
            "hostname": "node1",
            "service": "WorkerService",
            "active_commands": 0,
        }
