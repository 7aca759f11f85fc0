from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the monitor service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.request_timeout)

    def close(self) -> None:
        self._client.close()

    def start(self) -> Dict[str, Any]:
        return self._request("POST", "/monitor/start")

    def stop(self) -> Dict[str, Any]:
        return self._request("POST", "/monitor/stop")

    def reset(self) -> Dict[str, Any]:
        return self._request("POST", "/monitor/reset")

    def get_status(self) -> Dict[str, Any]:
        return self._request("GET", "/monitor/status")

    def get_statistics(self) -> Dict[str, Any]:
        return self._request("GET", "/monitor/statistics")

    def get_history(self, limit: Optional[int] = None) -> Dict[str, Any]:
        params = {"limit": limit} if limit is not None else None
        return self._request("GET", "/monitor/history", params=params)

    def get_latest(self) -> Optional[Dict[str, Any]]:
        """Return the newest reading, or ``None`` when nothing has been recorded."""
        return self._request("GET", "/monitor/latest", missing_ok=True)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        missing_ok: bool = False,
    ) -> Any:
        try:
            response = self._client.request(method, path, params=params)
            if missing_ok and response.status_code == 404:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
