"""HTTP client for the todo API.

The session lives in an explicit ``AuthContext`` handed to the client rather
than in module state. When an authenticated call comes back 401 the context is
expired, its subscribers are told once, and ``SessionExpired`` is raised.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, detail: Any):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class SessionExpired(ApiError):
    pass


class AuthContext:
    def __init__(self, token: Optional[str] = None, email: Optional[str] = None):
        self.token = token
        self.email = email
        self._listeners: List[Callable[[], None]] = []
        self._lock = threading.Lock()

    @property
    def authenticated(self) -> bool:
        return self.token is not None

    def sign_in(self, token: str, email: Optional[str] = None) -> None:
        with self._lock:
            self.token = token
            self.email = email

    def on_session_expired(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Subscribe to session expiry. Returns a function that unsubscribes."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def expire(self) -> None:
        with self._lock:
            if self.token is None:
                return
            self.token = None
            listeners = list(self._listeners)
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("session-expired listener failed")


class TodoClient:
    def __init__(self, http: httpx.Client, auth: AuthContext):
        self.http = http
        self.auth = auth

    def _request(self, method: str, path: str, *, authed: bool = True, **kwargs) -> Any:
        headers = kwargs.pop("headers", {})
        if authed and self.auth.token:
            headers["Authorization"] = f"Bearer {self.auth.token}"
        r = self.http.request(method, path, headers=headers, **kwargs)
        if r.status_code == 401 and authed:
            self.auth.expire()
            raise SessionExpired(r.status_code, _detail(r))
        if r.status_code >= 400:
            raise ApiError(r.status_code, _detail(r))
        return r.json()

    # auth

    def register(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/register", authed=False, json={"email": email, "password": password})
        self.auth.sign_in(data["token"], data["user"]["email"])
        return data["user"]

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/api/auth/login", authed=False, json={"email": email, "password": password})
        self.auth.sign_in(data["token"], data["user"]["email"])
        return data["user"]

    def me(self) -> Dict[str, Any]:
        return self._request("GET", "/api/me")["user"]

    # todos

    def list_todos(self, filter: str = "all", sort: str = "due", order: str = "desc",
                   completed_last: bool = True, q: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"filter": filter, "sort": sort, "order": order, "completedLast": "1" if completed_last else "0"}
        if q:
            params["q"] = q
        return self._request("GET", "/api/todos", params=params)

    def create_todo(self, text: str, **fields) -> Dict[str, Any]:
        return self._request("POST", "/api/todos", json={"text": text, **fields})

    def update_todo(self, todo_id: int, **fields) -> Dict[str, Any]:
        return self._request("PUT", f"/api/todos/{todo_id}", json=fields)

    def toggle_todo(self, todo_id: int) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/todos/{todo_id}/toggle")

    def delete_todo(self, todo_id: int) -> None:
        self._request("DELETE", f"/api/todos/{todo_id}")

    def clear_todos(self, scope: str = "all") -> int:
        return self._request("DELETE", "/api/todos", params={"scope": scope})["deleted"]

    # subtasks

    def list_subtasks(self, todo_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/todos/{todo_id}/subtasks")

    def add_subtask(self, todo_id: int, title: str) -> Dict[str, Any]:
        return self._request("POST", f"/api/todos/{todo_id}/subtasks", json={"title": title})

    def update_subtask(self, subtask_id: int, **fields) -> Dict[str, Any]:
        return self._request("PATCH", f"/api/subtasks/{subtask_id}", json=fields)

    def delete_subtask(self, subtask_id: int) -> None:
        self._request("DELETE", f"/api/subtasks/{subtask_id}")

    # backup

    def export_backup(self) -> Dict[str, Any]:
        return self._request("GET", "/api/backup/export")

    def import_backup(self, todos: List[Dict[str, Any]], mode: str = "merge") -> Dict[str, Any]:
        return self._request("POST", "/api/backup/import", json={"mode": mode, "todos": todos})


def _detail(r: httpx.Response) -> Any:
    try:
        data = r.json()
    except ValueError:
        return r.text
    return data.get("detail", data) if isinstance(data, dict) else data
