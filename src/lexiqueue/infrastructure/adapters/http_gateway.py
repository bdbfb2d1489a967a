import logging
from typing import Any

import httpx

from lexiqueue.domain.constants import (
    DEFAULT_API_BASE,
    MAX_LIMIT,
    REQUEST_TIMEOUT,
    REVIEW_ENDPOINT,
)
from lexiqueue.domain.errors import ReviewApiError
from lexiqueue.domain.models import GradeSubmission
from lexiqueue.domain.ports import ReviewGateway


class HttpReviewGateway(ReviewGateway):
    """Adapter for the vocabulary-review HTTP function (GET = list, POST = grade)."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        token: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None
        self.logger.debug(f"HttpReviewGateway initialized with base_url={self.base_url}")

    @property
    def url(self) -> str:
        return f"{self.base_url}/{REVIEW_ENDPOINT}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def list_queue(
        self,
        mode: str,
        limit: int,
        category: str | None = None,
        reset_session: bool = False,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {
            "mode": mode,
            "limit": min(max(int(limit), 1), MAX_LIMIT),
            "resetSession": "true" if reset_session else "false",
        }
        if category:
            params["category"] = category
        return await self._request("GET", params=params)

    async def submit_grade(self, submission: GradeSubmission) -> dict[str, Any]:
        return await self._request("POST", json=submission.to_payload())

    async def _request(self, method: str, **kwargs) -> dict[str, Any]:
        client = self._get_client()
        try:
            resp = await client.request(method, self.url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            self.logger.error(f"{method} {self.url} failed: {e}")
            raise ReviewApiError(f"Review service unreachable: {e}") from e

        data = self._parse(resp)
        if not resp.is_success:
            message = "Request failed"
            if isinstance(data, dict):
                message = data.get("error") or data.get("message") or message
            self.logger.warning(f"{method} {self.url} -> {resp.status_code}: {message}")
            raise ReviewApiError(message, status=resp.status_code, data=data)

        return data if isinstance(data, dict) else {"data": data}

    @staticmethod
    def _parse(resp: httpx.Response) -> Any:
        content_type = resp.headers.get("content-type", "")
        if "application/json" not in content_type:
            return {"raw": resp.text} if resp.text else {}
        try:
            return resp.json()
        except ValueError:
            return {}

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
