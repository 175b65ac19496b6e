"""Auphonic REST client used by the audio cleanup orchestrator."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

import httpx

from memoir_audio.config.settings import AuphonicConfig
from memoir_audio.errors import ProviderError
from memoir_audio.telemetry import observe_provider_call

logger = logging.getLogger(__name__)

PROVIDER_ID = "auphonic"

CleanupMode = Literal["cleaner", "cutter"]
ProductionStatus = Literal["waiting", "processing", "done", "error"]

CLEANER_ALGORITHMS: dict[str, Any] = {
    "leveler": True,
    "normloudness": True,
    "loudnesstarget": -19,
    "denoise": True,
    "denoisemethod": "speech_isolation",
    "denoiseamount": 6,
    "dehum": 60,
    "filtering": True,
}

CUTTER_ALGORITHMS: dict[str, Any] = {
    "filler_cutter": True,
    "cough_cutter": True,
    "silence_cutter": True,
    "cut_mode": "apply_cuts",
    "leveler": True,
    "normloudness": True,
    "loudnesstarget": -19,
}

_WAITING_CODE = 1
_DONE_LABEL = "Done"


def build_production_config(mode: CleanupMode = "cleaner", preset: str | None = None) -> dict[str, Any]:
    """Return the production payload for a preset id or one of the two modes."""

    config: dict[str, Any] = {
        "output_files": [{"format": "mp3", "bitrate": "128"}],
        "metadata": {"title": f"Memoir audio cleanup - {mode}"},
    }
    if preset:
        config["preset"] = preset
    elif mode == "cutter":
        config["algorithms"] = dict(CUTTER_ALGORITHMS)
    else:
        config["algorithms"] = dict(CLEANER_ALGORITHMS)
    return config


@dataclass(frozen=True)
class OutputFile:
    format: str
    download_url: Optional[str]
    size: Optional[int] = None


@dataclass(frozen=True)
class ProductionReport:
    """One status poll, with the provider's two status signals kept raw.

    ``status`` folds them with a single precedence: any error field means
    error, then the ``Done`` label means done, anything else is pending.
    The numeric code is never trusted for terminal decisions.
    """

    production_id: str
    status_code: Optional[int]
    status_label: str
    error_message: Optional[str] = None
    error_status: Optional[str] = None
    outputs: tuple[OutputFile, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ProductionReport":
        data = payload.get("data", payload) or {}
        raw_code = data.get("status")
        try:
            status_code = int(raw_code) if raw_code is not None else None
        except (TypeError, ValueError):
            status_code = None

        outputs = tuple(
            OutputFile(
                format=str(item.get("format") or ""),
                download_url=item.get("download_url"),
                size=item.get("size"),
            )
            for item in data.get("output_files") or []
            if isinstance(item, Mapping)
        )
        return cls(
            production_id=str(data.get("uuid") or ""),
            status_code=status_code,
            status_label=str(data.get("status_string") or ""),
            error_message=data.get("error_message") or None,
            error_status=data.get("error_status") or None,
            outputs=outputs,
        )

    @property
    def status(self) -> ProductionStatus:
        if self.error_message or self.error_status:
            return "error"
        if self.status_label == _DONE_LABEL:
            return "done"
        if self.status_code == _WAITING_CODE:
            return "waiting"
        return "processing"

    @property
    def is_terminal(self) -> bool:
        return self.status in ("done", "error")

    @property
    def error_detail(self) -> str:
        return self.error_message or self.error_status or "unknown error"


class AuphonicClient:
    """Bearer-authenticated async client for the production endpoints."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://auphonic.com",
        timeout: float = 60.0,
        retries: int = 2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=retries),
        )

    @classmethod
    def from_config(cls, config: AuphonicConfig) -> "AuphonicClient | None":
        if config.api_key is None:
            logger.warning("AUPHONIC_API_KEY not set; audio cleanup disabled")
            return None
        return cls(
            config.api_key.get_secret_value(),
            base_url=config.base_url,
            timeout=config.request_timeout_seconds,
            retries=config.transport_retries,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        started = time.perf_counter()
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            observe_provider_call(PROVIDER_ID, operation, time.perf_counter() - started, success=False)
            logger.error("Auphonic %s request failed: %s", operation, exc)
            raise ProviderError(PROVIDER_ID, f"Auphonic {operation} request failed") from exc

        success = response.is_success
        observe_provider_call(PROVIDER_ID, operation, time.perf_counter() - started, success=success)
        if not success:
            logger.error(
                "Auphonic %s returned %s: %s",
                operation,
                response.status_code,
                response.text[:500],
            )
            raise ProviderError(
                PROVIDER_ID,
                f"Auphonic {operation} failed with status {response.status_code}",
                status=response.status_code,
            )
        return response

    async def create_production(self, config: Mapping[str, Any]) -> str:
        response = await self._request("create", "POST", "/api/productions.json", json=dict(config))
        production_id = (response.json().get("data") or {}).get("uuid")
        if not production_id:
            raise ProviderError(PROVIDER_ID, "Auphonic did not return a production id")
        return str(production_id)

    async def upload(
        self,
        production_id: str,
        data: bytes,
        *,
        filename: str = "audio.webm",
        content_type: str = "audio/webm",
    ) -> None:
        await self._request(
            "upload",
            "POST",
            f"/api/production/{production_id}/upload.json",
            files={"input_file": (filename, data, content_type)},
        )

    async def start(self, production_id: str) -> None:
        await self._request("start", "POST", f"/api/production/{production_id}/start.json")

    async def get_status(self, production_id: str) -> ProductionReport:
        response = await self._request("status", "GET", f"/api/production/{production_id}.json")
        return ProductionReport.from_payload(response.json())

    async def download(self, url: str) -> bytes:
        response = await self._request("download", "GET", url, follow_redirects=True)
        return response.content


__all__ = [
    "PROVIDER_ID",
    "AuphonicClient",
    "CLEANER_ALGORITHMS",
    "CUTTER_ALGORITHMS",
    "CleanupMode",
    "OutputFile",
    "ProductionReport",
    "ProductionStatus",
    "build_production_config",
]
