"""
GlowMatch API Client: async REST client for the quiz backend.

Every call returns the unwrapped `data` member of the backend's
`{data}` / `{error}` envelope, or raises ApiError. Transport failures
(timeouts, refused connections) raise ApiError with code NETWORK_ERROR.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from glowmatch_quiz.core.errors import ApiError

logger = logging.getLogger("GlowMatchClient")

DEFAULT_BASE_URL = "https://backend-three-sigma-81.vercel.app/api"
DEFAULT_TIMEOUT_S = 10.0


class GlowMatchClient:
    """
    Thin async wrapper over the GlowMatch backend endpoints used by the quiz.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            base_url: Backend API root (without trailing slash)
            token: Bearer token of the signed-in user, if any
            timeout_s: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self, with_body: bool) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        if with_body:
            headers["Content-Type"] = "application/json"
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self._transport
            ) as client:
                res = await client.request(
                    method,
                    url,
                    headers=self._headers(json_body is not None),
                    json=json_body,
                    params=params,
                )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ApiError(
                f"Unable to reach GlowMatch ({type(e).__name__})",
                code="NETWORK_ERROR",
                details=str(e),
            ) from e

        try:
            data = res.json()
        except ValueError:
            data = {"raw": res.text}

        if res.status_code >= 400:
            body = data if isinstance(data, dict) else {"raw": data}
            message = body.get("error") or f"Request failed with status {res.status_code}"
            logger.warning(f"{method} {path} -> {res.status_code}: {message}")
            raise ApiError(
                str(message),
                status=res.status_code,
                details=body.get("details", body),
            )

        return data if isinstance(data, dict) else {"data": data}

    @staticmethod
    def _unwrap(payload: Dict[str, Any]) -> Any:
        return payload.get("data")

    # --- Quiz lifecycle ---

    async def start_quiz(self) -> Dict[str, Any]:
        """Consume one quiz attempt for the signed-in user."""
        data = self._unwrap(await self._request("POST", "/quiz/start", json_body={}))
        if not data:
            raise ApiError("Unable to start quiz", code="START_ATTEMPT_ERROR")
        return data

    async def save_attempt(
        self,
        user_id: str,
        quiz_data: Dict[str, Any],
        results: Dict[str, Any],
        is_autosave: bool = False,
    ) -> Dict[str, Any]:
        """
        Persist a completed quiz.

        Returns:
            The stored attempt; always carries an `id`
        """
        payload = await self._request(
            "POST",
            "/quiz/attempts",
            json_body={
                "userId": user_id,
                "quiz_data": quiz_data,
                "results": results,
                "is_autosave": is_autosave,
            },
        )
        attempt = self._unwrap(payload)
        if not isinstance(attempt, dict) or not attempt.get("id"):
            raise ApiError(
                "Save succeeded without an attempt id",
                code="SAVE_ERROR",
                details=payload,
            )
        return attempt

    async def save_autosave(self, user_id: str, quiz_data: Dict[str, Any]) -> None:
        await self._request(
            "POST",
            "/quiz/autosave",
            json_body={"userId": user_id, "quiz_data": quiz_data},
        )

    async def get_autosave(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return `{quiz_data, updated_at}` or None when nothing is saved."""
        return self._unwrap(await self._request("GET", f"/quiz/autosave/{user_id}"))

    async def delete_autosave(self, user_id: str) -> None:
        await self._request("DELETE", f"/quiz/autosave/{user_id}")

    # --- History ---

    async def get_history(self, user_id: str) -> List[Dict[str, Any]]:
        return self._unwrap(await self._request("GET", f"/quiz/history/{user_id}")) or []

    async def get_attempt(self, attempt_id: str) -> Dict[str, Any]:
        return self._unwrap(await self._request("GET", f"/quiz/attempts/{attempt_id}"))

    async def delete_attempt(self, attempt_id: str) -> None:
        await self._request("DELETE", f"/quiz/attempts/{attempt_id}")

    async def delete_history(self, user_id: str) -> None:
        await self._request("DELETE", f"/quiz/history/{user_id}")

    # --- Enrichment ---

    async def run_analysis(
        self,
        quiz_data: Dict[str, Any],
        model: str,
        images: Optional[List[Dict[str, Any]]] = None,
        attempt_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"quizData": quiz_data, "images": images or [], "model": model}
        if attempt_id:
            body["attemptId"] = attempt_id
        return self._unwrap(await self._request("POST", "/analysis", json_body=body)) or {}

    async def upload_report(
        self,
        attempt_id: str,
        filename: str,
        data_b64: str,
        analysis: Optional[Any] = None,
    ) -> Dict[str, Any]:
        body = {
            "attemptId": attempt_id,
            "filename": filename,
            "data": data_b64,
            "analysis": analysis,
        }
        return self._unwrap(await self._request("POST", "/report/upload", json_body=body)) or {}

    # --- Entitlements & referrals ---

    async def get_subscription(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._unwrap(await self._request("GET", f"/subscription/{user_id}"))

    async def get_referral(self) -> Dict[str, Any]:
        return self._unwrap(await self._request("GET", "/referrals/me")) or {}

    async def create_referral(self) -> Dict[str, Any]:
        return self._unwrap(await self._request("POST", "/referrals/create", json_body={})) or {}
