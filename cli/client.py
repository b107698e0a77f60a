from __future__ import annotations

from typing import Any, Dict, List, NoReturn

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Thin HTTP client for the monitor API."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_status(self) -> Dict[str, Any]:
        return self._request("GET", "/monitor/status").json()

    def start(self) -> Dict[str, Any]:
        return self._request("POST", "/monitor/start").json()

    def stop(self) -> Dict[str, Any]:
        return self._request("POST", "/monitor/stop").json()

    def check(self) -> List[Dict[str, Any]]:
        return self._request("POST", "/monitor/check").json()

    def list_reports(self) -> List[str]:
        payload = self._request("GET", "/reports").json()
        reports = payload.get("reports")
        if not isinstance(reports, list):
            raise typer.BadParameter("Unexpected response payload when listing reports.")
        return reports

    def get_report(self, filename: str) -> str:
        return self._request("GET", f"/reports/{filename}").text

    def _request(self, method: str, url: str) -> httpx.Response:
        try:
            response = self._client.request(method, url)
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
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
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
