"""
远程执行客户端测试（httpx.MockTransport）
"""

import json

import httpx
import pytest

from cluster import ComputeNode
from core.exceptions import RemoteExecutionException
from dispatch import HttpRemoteExecutor, build_worker_url


def _executor(handler) -> HttpRemoteExecutor:
    return HttpRemoteExecutor(service_name="WorkerService", timeout=5, transport=httpx.MockTransport(handler))


class TestBuildWorkerUrl:
    def test_url(self):
        assert build_worker_url("node1", 3000) == "http://node1:3000/WorkerService"
        assert build_worker_url("node1", "3001", "Exec") == "http://node1:3001/Exec"

    @pytest.mark.parametrize("host,port", [("", 3000), ("node", 80), ("node", "x")])
    def test_invalid(self, host, port):
        with pytest.raises(ValueError):
            build_worker_url(host, port)


class TestHttpRemoteExecutor:
    def test_posts_command_and_returns_exit_code(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"exit_code": 0, "hostname": "node1"})

        with _executor(handler) as executor:
            code = executor.execute(ComputeNode("node1", 3001), "wc -w < part1.txt > count1.txt")

        assert code == 0
        assert seen["url"] == "http://node1:3001/WorkerService/execute"
        assert seen["body"]["command"] == "wc -w < part1.txt > count1.txt"

    def test_non_zero_exit_code_is_returned(self, log_messages):
        def handler(request):
            return httpx.Response(
                200, json={"exit_code": 2, "stderr": "no such file\n", "hostname": "node1"}
            )

        code = _executor(handler).execute(ComputeNode("node1", 3000), "cat missing")

        assert code == 2
        assert "[node1:3000] no such file" in log_messages

    def test_http_error_status(self):
        executor = _executor(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(RemoteExecutionException) as exc_info:
            executor.execute(ComputeNode("node1", 3000), "true")
        assert exc_info.value.address == "node1:3000"

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RemoteExecutionException):
            _executor(handler).execute(ComputeNode("node1", 3000), "true")

    def test_invalid_response_body(self):
        executor = _executor(lambda request: httpx.Response(200, json={"unexpected": True}))
        with pytest.raises(RemoteExecutionException):
            executor.execute(ComputeNode("node1", 3000), "true")

    def test_non_json_body(self):
        executor = _executor(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(RemoteExecutionException):
            executor.execute(ComputeNode("node1", 3000), "true")
