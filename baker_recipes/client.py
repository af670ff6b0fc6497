"""
HTTP client for the Baker Recipes API.

Used by front ends and scripts that render or edit recipes. Payloads are plain
dicts in the wire format (camelCase keys); validation happens server side and
rejected recipes surface as :class:`RecipesApiError` with the server's issue
list attached.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class RecipesApiError(Exception):
    def __init__(self, status_code: int, message: str, details: Optional[List[Dict[str, Any]]] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or []


class RecipesClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._client = httpx.Client(base_url=base_url, timeout=timeout_seconds, transport=transport)

    def __enter__(self) -> "RecipesClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.error("Recipes API %s %s failed: %s", method, path, exc)
            raise RecipesApiError(503, f"Recipes API unreachable: {exc}") from exc

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message") or body.get("detail") or response.reason_phrase
        details = body.get("details") if isinstance(body.get("details"), list) else None
        logger.warning("Recipes API %s %s returned %s: %s", method, path, response.status_code, message)
        raise RecipesApiError(response.status_code, str(message), details)

    def get_recipes(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/recipes")

    def get_recipe(self, recipe_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/recipes/{recipe_id}")

    def create_recipe(self, recipe: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/recipes", json=recipe)

    def update_recipe(self, recipe_id: int, recipe: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/recipes/{recipe_id}", json=recipe)

    def delete_recipe(self, recipe_id: int) -> None:
        self._request("DELETE", f"/recipes/{recipe_id}")
