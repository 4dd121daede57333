"""httpx-based client for the Docker Engine API over its unix socket.

All methods return typed responses or raise RuntimeUnavailable / ContainerNotFound.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from container_health.runtime.models import InspectResult, StatsSample

logger = logging.getLogger(__name__)

API_BASE_URL = "http://docker"


class RuntimeUnavailable(Exception):
    """Raised when the Docker daemon is unreachable or fails a request."""


class ContainerNotFound(Exception):
    """Raised when the runtime does not know the container."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Container not found: {name}")


class DockerClient:
    """Synchronous Docker Engine API client (list / inspect / one-shot stats)."""

    def __init__(
        self,
        socket_path: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._socket_path = socket_path
        self._client = httpx.Client(
            base_url=API_BASE_URL,
            transport=transport or httpx.HTTPTransport(uds=socket_path),
            timeout=timeout,
        )

    def __enter__(self) -> DockerClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _get(
        self,
        path: str,
        params: dict[str, str] | None = None,
        name: str | None = None,
    ) -> Any:
        """Perform a GET request and return the decoded JSON body."""
        try:
            resp = self._client.get(path, params=params)
        except httpx.TimeoutException:
            raise RuntimeUnavailable("Docker daemon request timed out")
        except httpx.TransportError as e:
            raise RuntimeUnavailable(
                f"Docker daemon unreachable at {self._socket_path}: {e}"
            ) from e

        if resp.status_code == 404 and name is not None:
            raise ContainerNotFound(name)
        if resp.status_code >= 400:
            detail = resp.text
            try:
                detail = resp.json().get("message", resp.text)
            except Exception:
                pass
            raise RuntimeUnavailable(f"Docker error {resp.status_code}: {detail}")
        try:
            return resp.json()
        except ValueError as e:
            raise RuntimeUnavailable(f"Unreadable Docker response for {path}: {e}") from e

    # ── High-level methods ───────────────────────────────────────────────

    def list_containers(self) -> list[str]:
        """GET /containers/json?all=1 — every container name, running or not."""
        containers = self._get("/containers/json", params={"all": "1"})
        names: list[str] = []
        for c in containers:
            container_names = c.get("Names") or []
            if container_names:
                names.append(container_names[0].lstrip("/"))
        return names

    def inspect(self, name: str) -> InspectResult:
        """GET /containers/{name}/json"""
        return InspectResult.from_api(self._get(f"/containers/{name}/json", name=name))

    def sample_stats(self, name: str) -> StatsSample:
        """GET /containers/{name}/stats?stream=false — a single sample."""
        payload = self._get(
            f"/containers/{name}/stats", params={"stream": "false"}, name=name,
        )
        return StatsSample.from_api(payload)
