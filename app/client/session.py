"""
Client Session - local mirror of a user's tasks kept in sync over REST and WebSocket.

The session authenticates, loads tasks/categories/analytics in full, then
listens on the broadcast channel and folds each change event into its local
cache. Merging is keyed by task id and guarded by the task version, so a
session's own echoed events and its direct REST responses can arrive in
either order without duplicating or reverting anything.
"""

import asyncio
import json
from collections import OrderedDict
from collections.abc import Callable
from datetime import UTC, date, datetime
from typing import Any
from urllib.parse import urlencode

import httpx
import websockets

from app.config import settings
from app.utils.logger import setup_logger

logger = setup_logger("client")

VIEWS = ("dashboard", "all", "today", "upcoming", "overdue", "completed")
MAX_REMEMBERED_EVENTS = 1000


class ApiError(Exception):
    """Non-2xx response from the TaskFlow API."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"{status_code}: {message}")


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_today(value: str | None, today: date | None = None) -> bool:
    due = parse_timestamp(value)
    if due is None:
        return False
    return due.astimezone(UTC).date() == (today or datetime.now(UTC).date())


def is_overdue(value: str | None, today: date | None = None) -> bool:
    due = parse_timestamp(value)
    if due is None:
        return False
    return due.astimezone(UTC).date() < (today or datetime.now(UTC).date())


class ClientSession:
    """
    State mirror for one signed-in user.

    ``on_change`` is called with the active view name after every cache
    mutation; it stands in for re-rendering.
    """

    def __init__(
        self,
        base_url: str = f"http://localhost:{settings.server_port}{settings.api_prefix}",
        *,
        ws_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        on_change: Callable[[str], None] | None = None,
        token: str | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.ws_url = ws_url or (
            self.base_url.replace("https://", "wss://", 1).replace("http://", "ws://", 1)
            + "/ws"
        )
        self.timeout = timeout if timeout is not None else settings.client_timeout
        self._http = http_client or httpx.AsyncClient(timeout=self.timeout)
        self._owns_http = http_client is None
        self.on_change = on_change

        self.token = token
        self.user: dict[str, Any] | None = None
        self.tasks: list[dict[str, Any]] = []
        self.categories: list[dict[str, Any]] = []
        self.analytics: dict[str, Any] | None = None
        self.current_view = "dashboard"
        self.filters: dict[str, str] = {}

        self._tombstones: set[str] = set()
        self._seen_events: OrderedDict[str, None] = OrderedDict()
        self._listener: asyncio.Task | None = None

    # --- transport ---
    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        response = await self._http.request(
            method,
            f"{self.base_url}{endpoint}",
            json=json_body,
            params=params,
            headers=headers,
            timeout=self.timeout,
        )
        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            message = data.get("error") if isinstance(data, dict) else None
            raise ApiError(response.status_code, message or "Request failed")
        return data

    # --- authentication ---
    # Signing in, or restoring a stored token, refreshes every cache and then
    # opens the live channel unless ``listen`` is false.
    async def register(
        self, name: str, email: str, password: str, *, listen: bool = True
    ) -> dict[str, Any]:
        data = await self.request(
            "POST",
            "/auth/register",
            json_body={"name": name, "email": email, "password": password},
        )
        await self._sign_in(data, listen=listen)
        return self.user

    async def login(
        self, email: str, password: str, *, listen: bool = True
    ) -> dict[str, Any]:
        data = await self.request(
            "POST", "/auth/login", json_body={"email": email, "password": password}
        )
        await self._sign_in(data, listen=listen)
        return self.user

    async def check_auth(self, *, listen: bool = True) -> bool:
        """Restore the session from a stored token. Signs out if it is rejected."""
        if not self.token:
            return False
        try:
            data = await self.request("GET", "/auth/me")
        except ApiError:
            await self.logout()
            return False
        self.user = data["user"]
        await self.load_data(listen=listen)
        return True

    async def logout(self) -> None:
        await self.stop_listening()
        self.token = None
        self.user = None
        self.tasks = []
        self.categories = []
        self.analytics = None
        self._tombstones.clear()
        self._seen_events.clear()
        self.render()

    async def _sign_in(self, data: dict[str, Any], *, listen: bool) -> None:
        self.token = data["token"]
        self.user = data["user"]
        logger.info(f"Signed in as {self.user.get('email')}")
        await self.load_data(listen=listen)

    # --- loading ---
    async def load_data(self, listen: bool = True) -> None:
        """Full refresh of every cache, then subscribe to live events."""
        await asyncio.gather(
            self.load_tasks(self.filters),
            self.load_categories(),
            self.load_analytics(),
        )
        if listen:
            self.start_listening()

    async def load_tasks(self, filters: dict[str, str] | None = None) -> list[dict]:
        self.filters = {k: v for k, v in (filters or {}).items() if v}
        data = await self.request("GET", "/tasks", params=self.filters or None)
        self.tasks = list(data["tasks"])
        # The server is authoritative: anything it still returns is not deleted
        self._tombstones.difference_update(t.get("id") for t in self.tasks)
        self.render()
        return self.tasks

    async def load_categories(self) -> list[dict]:
        data = await self.request("GET", "/categories")
        self.categories = list(data["categories"])
        self.render()
        return self.categories

    async def load_analytics(self) -> dict[str, Any]:
        data = await self.request("GET", "/analytics")
        self.analytics = data["analytics"]
        return self.analytics

    # --- task operations ---
    async def create_task(self, task_data: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("POST", "/tasks", json_body=task_data)
        task = data["task"]
        if self.merge_task(task):
            self.render()
        return task

    async def update_task(self, task_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("PUT", f"/tasks/{task_id}", json_body=updates)
        task = data["task"]
        if self.merge_task(task, insert=False):
            self.render()
        return task

    async def delete_task(self, task_id: str) -> None:
        await self.request("DELETE", f"/tasks/{task_id}")
        if self.remove_task(task_id):
            self.render()

    async def toggle_task_complete(self, task_id: str) -> dict[str, Any] | None:
        task = self.find_task(task_id)
        if task is None:
            return None
        new_status = "todo" if task.get("completed") else "completed"
        return await self.update_task(task_id, {"status": new_status})

    async def create_category(self, category_data: dict[str, Any]) -> dict[str, Any]:
        data = await self.request("POST", "/categories", json_body=category_data)
        category = data["category"]
        self.categories.append(category)
        self.render()
        return category

    # --- reconciliation ---
    def find_task(self, task_id: str) -> dict[str, Any] | None:
        for task in self.tasks:
            if task.get("id") == task_id:
                return task
        return None

    def merge_task(self, task: dict[str, Any], *, insert: bool = True) -> bool:
        """
        Fold one task snapshot into the cache. Returns whether the cache changed.

        Unknown ids are inserted only when ``insert`` is true; known ids are
        replaced only by a strictly newer version. Deleted ids stay deleted.
        """
        task_id = task.get("id")
        if not task_id or task_id in self._tombstones:
            return False

        for index, cached in enumerate(self.tasks):
            if cached.get("id") != task_id:
                continue
            if task.get("version", 0) > cached.get("version", 0):
                self.tasks[index] = task
                return True
            return False

        if not insert:
            return False
        self.tasks.insert(0, task)
        return True

    def remove_task(self, task_id: str) -> bool:
        self._tombstones.add(task_id)
        before = len(self.tasks)
        self.tasks = [t for t in self.tasks if t.get("id") != task_id]
        return len(self.tasks) != before

    def apply_event(self, message: dict[str, Any]) -> bool:
        """Apply one broadcast frame. Returns whether the cache changed."""
        event_id = message.get("eventId")
        if event_id:
            if event_id in self._seen_events:
                return False
            self._seen_events[event_id] = None
            if len(self._seen_events) > MAX_REMEMBERED_EVENTS:
                self._seen_events.popitem(last=False)

        event_type = message.get("type")
        data = message.get("data")
        if event_type == "task-created" and isinstance(data, dict):
            changed = self.merge_task(data)
        elif event_type == "task-updated" and isinstance(data, dict):
            changed = self.merge_task(data, insert=False)
        elif event_type == "task-deleted" and isinstance(data, str):
            changed = self.remove_task(data)
        else:
            return False

        if changed:
            self.render()
        return changed

    # --- views ---
    def set_view(self, view: str) -> None:
        if view not in VIEWS:
            raise ValueError(f"Unknown view: {view}")
        self.current_view = view
        self.render()

    def visible_tasks(self, today: date | None = None) -> list[dict[str, Any]]:
        view = self.current_view
        if view in ("dashboard", "all"):
            return list(self.tasks)
        if view == "completed":
            return [t for t in self.tasks if t.get("completed")]
        if view == "today":
            return [t for t in self.tasks if is_today(t.get("dueDate"), today)]
        if view == "overdue":
            return [
                t
                for t in self.tasks
                if not t.get("completed") and is_overdue(t.get("dueDate"), today)
            ]
        # upcoming
        return [
            t
            for t in self.tasks
            if not t.get("completed")
            and t.get("dueDate")
            and not is_overdue(t.get("dueDate"), today)
            and not is_today(t.get("dueDate"), today)
        ]

    def render(self) -> None:
        if self.on_change is not None:
            self.on_change(self.current_view)

    # --- live channel ---
    def start_listening(self) -> asyncio.Task:
        if self._listener is None or self._listener.done():
            self._listener = asyncio.get_running_loop().create_task(
                self._run_listener()
            )
        return self._listener

    async def stop_listening(self) -> None:
        listener, self._listener = self._listener, None
        if listener is not None and not listener.done():
            listener.cancel()
            try:
                await listener
            except asyncio.CancelledError:
                pass

    @property
    def is_listening(self) -> bool:
        return self._listener is not None and not self._listener.done()

    async def _run_listener(self) -> None:
        """Background wrapper around ``listen`` that logs failures and clears itself."""
        try:
            await self.listen()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(
                f"Live channel failed: {e!r}. Cached tasks may be stale until the next load_data()"
            )
        finally:
            if self._listener is asyncio.current_task():
                self._listener = None

    async def listen(self) -> None:
        """Consume broadcast frames until the connection closes."""
        url = f"{self.ws_url}?{urlencode({'token': self.token or ''})}"
        async with websockets.connect(url) as connection:
            logger.info("Live channel connected")
            async for raw in connection:
                try:
                    message = json.loads(raw)
                except (TypeError, ValueError):
                    continue
                if isinstance(message, dict):
                    self.apply_event(message)
        logger.info("Live channel closed")

    async def close(self) -> None:
        await self.stop_listening()
        if self._owns_http:
            await self._http.aclose()
