from __future__ import annotations

from datetime import datetime
from typing import Any, Dict

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the interpolation service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def tabulate(
        self, device_id: str, start: datetime, end: datetime, count: int
    ) -> Dict[str, Dict[str, float]]:
        body = {
            "id": device_id,
            "from": start.isoformat(),
            "to": end.isoformat(),
            "count": count,
        }
        try:
            response = self._client.post("/api/tabulated_hardware", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        payload = response.json()
        if not isinstance(payload, dict):
            raise typer.BadParameter("Unexpected response payload when tabulating samples.")
        return payload

    def get_device(self, device_id: str) -> Dict[str, Any]:
        try:
            response = self._client.get(f"/api/devices/{device_id}")
            if response.status_code == 404:
                raise typer.BadParameter(f"Device {device_id} was not found.")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        kind: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
            kind = data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        prefix = f"{kind}: " if kind else ""
        message = (
            f"Request failed with status {exc.response.status_code}: "
            f"{prefix}{detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
