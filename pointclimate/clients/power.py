from __future__ import annotations

import logging
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from pointclimate.core.config import POWER_MONTHLY_POINT_URL
from pointclimate.models.climate import DEFAULT_FILL_VALUE, ArchiveResponse, Coordinate

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {408, 425, 429, 500, 502, 503, 504}


class RetryableArchiveError(Exception):
    pass


class PowerClient:
    """Monthly point client for the NASA POWER archive.

    ``fetch_year_data`` never raises: every transport, status or shape problem
    is logged and reported as ``None``.
    """

    def __init__(
        self,
        *,
        user_agent: str,
        timeout_seconds: float,
        base_url: str = POWER_MONTHLY_POINT_URL,
        community: str = "SB",
        fill_value_default: float = DEFAULT_FILL_VALUE,
        retry_attempts: int = 3,
        retry_max_wait_seconds: float = 8.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._community = community
        self._fill_value_default = fill_value_default
        self._retry_attempts = max(int(retry_attempts), 1)
        self._retry_max_wait_seconds = retry_max_wait_seconds
        self._client = httpx.AsyncClient(
            timeout=timeout_seconds,
            headers={
                "User-Agent": user_agent,
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_year_data(
        self, coordinate: Coordinate, fields: list[str], year: int
    ) -> ArchiveResponse | None:
        params = {
            "parameters": ",".join(fields),
            "community": self._community,
            "longitude": coordinate.lng,
            "latitude": coordinate.lat,
            "start": year,
            "end": year,
            "format": "JSON",
        }
        try:
            payload = await self._get_json(params)
            return parse_archive_response(
                payload, fields=fields, fill_value_default=self._fill_value_default
            )
        except Exception as e:  # noqa: BLE001 - gateway reports absence, never raises
            logger.warning(
                "event=archive_fetch_failed lat=%s lng=%s year=%s error=%r",
                coordinate.lat,
                coordinate.lng,
                year,
                e,
            )
            return None

    async def _get_json(self, params: dict[str, Any]) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential_jitter(initial=0.5, max=self._retry_max_wait_seconds),
            retry=retry_if_exception_type((RetryableArchiveError, httpx.TransportError)),
            reraise=True,
        ):
            with attempt:
                resp = await self._client.get(self._base_url, params=params)
                if resp.status_code in RETRYABLE_STATUS_CODES:
                    raise RetryableArchiveError(f"Retryable HTTP status: {resp.status_code}")
                resp.raise_for_status()
                return resp.json()


def parse_archive_response(
    payload: Any, *, fields: list[str], fill_value_default: float = DEFAULT_FILL_VALUE
) -> ArchiveResponse:
    try:
        parameter = payload["properties"]["parameter"]
    except Exception as e:  # noqa: BLE001
        raise ValueError("Unexpected POWER response shape") from e
    if not isinstance(parameter, dict) or not parameter:
        raise ValueError("POWER response contained no parameter block")

    header = payload.get("header")
    fill_value = None
    if isinstance(header, dict):
        fill_value = _float_or_none(header.get("fill_value"))
    if fill_value is None:
        fill_value = fill_value_default

    parameters: dict[str, dict[str, float]] = {}
    for name in fields:
        series = parameter.get(name)
        if not isinstance(series, dict):
            continue
        values: dict[str, float] = {}
        for label, raw in series.items():
            value = _float_or_none(raw)
            if value is not None:
                values[str(label)] = value
        parameters[name] = values

    return ArchiveResponse(parameters=parameters, fill_value=fill_value)


def _float_or_none(v: Any) -> float | None:
    try:
        if v is None or isinstance(v, bool):
            return None
        return float(v)
    except Exception:
        return None
