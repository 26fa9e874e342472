from __future__ import annotations

import asyncio
import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import pytest

from checkpoint.container import build_container
from checkpoint.database import DatabaseManager
from checkpoint.models.schemas import Event, NewEvent


class FakeRemoteService:
    """In-memory stand-in for the remote log/employee service."""

    def __init__(self):
        self.employees: dict[str, dict[str, Any]] = {
            "CA12345": {"id": "CA12345", "name": "John Smith", "department": "IT", "email": "john@company.com", "isActive": True},
            "CA54321": {"id": "CA54321", "name": "Jane Doe", "department": "HR", "email": "jane@company.com", "isActive": True},
            "HR00001": {"id": "HR00001", "name": "Bob Johnson", "department": "Finance", "email": "bob@company.com", "isActive": True},
        }
        self.logs: list[dict[str, Any]] = []
        self.down = False
        self.timeout = False
        self.fail_status: Optional[int] = None
        self.require_auth = False
        self.valid_tokens: set[str] = set()
        self.refresh_calls = 0
        self.refresh_fails = False
        self.requests: list[tuple[str, str]] = []
        self.wrap_responses = False

    # ---------- helpers ----------

    def _json(self, status: int, body: Any) -> httpx.Response:
        if self.wrap_responses and status < 400:
            body = {"data": body, "status": status}
        return httpx.Response(status, json=body)

    def _log_with_employee(self, log: dict[str, Any]) -> dict[str, Any]:
        return {**log, "employee": self.employees.get(log["employeeId"])}

    # ---------- transport ----------

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.requests.append((method, path))

        if self.down:
            raise httpx.ConnectError("network unreachable", request=request)
        if self.timeout:
            raise httpx.ReadTimeout("read timed out", request=request)

        if path == "/auth/login":
            body = json.loads(request.content)
            if body == {"email": "guard@company.com", "password": "secret"}:
                self.valid_tokens.add("access-1")
                return httpx.Response(201, json={"access_token": "access-1", "refresh_token": "refresh-1", "user": {"id": 1, "email": "guard@company.com", "role": "user"}})
            return httpx.Response(401, json={"message": "Invalid credentials", "statusCode": 401})
        if path == "/auth/refresh":
            self.refresh_calls += 1
            await asyncio.sleep(0)
            if self.refresh_fails:
                return httpx.Response(401, json={"message": "Refresh token expired"})
            token = f"access-r{self.refresh_calls}"
            self.valid_tokens.add(token)
            return httpx.Response(200, json={"data": {"accessToken": token, "refreshToken": "refresh-2"}})
        if path == "/auth/logout":
            return httpx.Response(200, json={})

        if self.fail_status is not None:
            return httpx.Response(self.fail_status, json={"message": "Internal server error"})

        if self.require_auth:
            header = request.headers.get("Authorization", "")
            if header.removeprefix("Bearer ") not in self.valid_tokens:
                return httpx.Response(401, json={"message": "Unauthorized", "statusCode": 401})

        return self._route(method, path, request)

    def _route(self, method: str, path: str, request: httpx.Request) -> httpx.Response:
        parts = [p for p in path.split("/") if p]

        if parts[0] == "logs":
            if method == "POST" and len(parts) == 1:
                body = json.loads(request.content)
                if body.get("employeeId") not in self.employees:
                    return httpx.Response(404, json={"message": f"Employee with ID {body.get('employeeId')} not found"})
                if body.get("action") not in ("entry", "exit"):
                    return httpx.Response(404, json={"message": "Action must be either 'entry' or 'exit'"})
                log = {"id": str(uuid.uuid4()), **body}
                self.logs.append(log)
                return self._json(201, self._log_with_employee(log))
            if method == "GET" and len(parts) == 1:
                ordered = sorted(self.logs, key=lambda l: l["timestamp"], reverse=True)
                return self._json(200, [self._log_with_employee(l) for l in ordered])
            if method == "DELETE" and len(parts) == 1:
                self.logs.clear()
                return httpx.Response(200)
            if method == "GET" and parts[1:] == ["stats"]:
                return self._json(200, {"totalLogs": len(self.logs), "entriesToday": 0, "exitsToday": 0})
            if method == "GET" and parts[1] == "device":
                return self._json(200, [self._log_with_employee(l) for l in self.logs if l["deviceId"] == parts[2]])
            if method == "GET" and parts[1] == "date-range":
                start = datetime.fromisoformat(request.url.params["startDate"])
                end = datetime.fromisoformat(request.url.params["endDate"])
                return self._json(200, [
                    self._log_with_employee(l) for l in self.logs
                    if start <= datetime.fromisoformat(l["timestamp"]) <= end
                ])
            matches = [l for l in self.logs if l["id"] == parts[1]]
            if not matches:
                return httpx.Response(404, json={"message": f"Log entry with ID {parts[1]} not found"})
            if method == "GET":
                return self._json(200, self._log_with_employee(matches[0]))
            if method == "DELETE":
                self.logs.remove(matches[0])
                return httpx.Response(204)

        if parts[0] == "employees":
            everyone = sorted(self.employees.values(), key=lambda e: e["name"])
            if len(parts) == 1:
                return self._json(200, everyone)
            if parts[1] == "search":
                q = request.url.params.get("q", "").lower()
                return self._json(200, [e for e in everyone if q in e["name"].lower() or q in e["email"].lower() or q in e["department"].lower()])
            if parts[1] == "department":
                return self._json(200, [e for e in everyone if e["department"] == parts[2]])
            employee = self.employees.get(parts[1])
            if employee is None:
                return httpx.Response(404, json={"message": f"Employee with ID {parts[1]} not found"})
            return self._json(200, employee)

        return httpx.Response(404, json={"message": "Cannot route"})


def make_event(
    ts: datetime,
    action: str = "entry",
    device_id: str = "CA12345",
    name: str = "John Smith",
    event_id: Optional[str] = None,
) -> Event:
    return Event(
        id=event_id or str(uuid.uuid4()),
        timestamp=ts,
        subject_name=name,
        device_id=device_id,
        action=action,
    )


def new_event(action: str = "entry", device_id: str = "CA12345", name: str = "John Smith") -> NewEvent:
    return NewEvent(
        timestamp=datetime.now(timezone.utc),
        subject_name=name,
        device_id=device_id,
        action=action,
    )


@pytest.fixture
def remote() -> FakeRemoteService:
    return FakeRemoteService()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'checkpoint_local.db'}"


@pytest.fixture
def db(db_url) -> DatabaseManager:
    manager = DatabaseManager(db_url)
    yield manager
    manager.dispose()


@pytest.fixture
def container(db_url, remote):
    wiring = build_container(
        db_url=db_url,
        api_base_url="http://remote.test",
        transport=httpx.MockTransport(remote.handle),
    )
    yield wiring
    asyncio.run(wiring.aclose())
