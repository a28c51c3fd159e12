"""
CRM backend clients.

CrmBackend talks to the CRM's voice REST endpoints over HTTP. It is blocking
(requests); dispatcher handlers call it through asyncio.to_thread.

OfflineBackend answers the same calls with fixed sample figures so the voice
pipeline stays usable without a server (demos, console frontend, tests).
"""

from datetime import date
from typing import Any, Optional

import requests

from crm_voice.errors import BackendError
from crm_voice.logger import get_logger


def _jsonable(value):
    if isinstance(value, date):
        return value.isoformat()
    return value


class CrmBackend:
    """Client for the CRM voice REST API"""

    def __init__(self, base_url: str, token: Optional[str] = None,
                 timeout: float = 10, config=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.logger = get_logger(__name__, config)

    @classmethod
    def from_config(cls, config) -> Optional["CrmBackend"]:
        """Build a client from ``backend.*`` settings, or None if no URL is set."""
        url = config.get("backend.url")
        if not url:
            return None
        return cls(
            url,
            token=config.get("backend.token"),
            timeout=config.get("backend.timeout_seconds", 10),
            config=config,
        )

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, *, params=None, payload=None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(
                method,
                url,
                params=params,
                json={k: _jsonable(v) for k, v in payload.items()} if payload else None,
                headers=self._headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            self.logger.error(f"CRM backend {method} {path} failed: HTTP {status}")
            raise BackendError(f"{method} {path} returned HTTP {status}", status) from e
        except (requests.RequestException, ValueError) as e:
            self.logger.error(f"CRM backend {method} {path} failed: {e}")
            raise BackendError(f"{method} {path} failed: {e}") from e

    def _get(self, path: str, **params) -> Any:
        return self._request("GET", path, params={k: v for k, v in params.items() if v is not None})

    def _post(self, path: str, **payload) -> Any:
        return self._request("POST", path, payload=payload)

    # ------------------------------------------------------------------
    # Stats
    # ------------------------------------------------------------------

    def count(self, entity_type: str, period: str) -> int:
        data = self._get(f"/voice/stats/{entity_type}/count", period=period)
        return int(data["count"])

    def pipeline_value(self) -> float:
        return float(self._get("/voice/stats/pipeline")["value"])

    def closing(self, period: str) -> dict:
        return self._get("/voice/stats/closing", period=period)

    def top(self, entity_type: str, sort: str) -> dict:
        return self._get(f"/voice/stats/{entity_type}/top", sort=sort)

    def summary(self, period: str) -> dict:
        return self._get("/voice/stats/summary", period=period)

    def performance(self, period: str) -> dict:
        return self._get("/voice/stats/performance", period=period)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_task(self, description: Optional[str], due=None) -> dict:
        return self._post("/voice/tasks", description=description, due=due)

    def create_note(self, content: str, record_id: Optional[str] = None) -> dict:
        return self._post("/voice/notes", content=content, record_id=record_id)

    def update_deal(self, deal: str, **fields) -> dict:
        return self._post("/voice/deals/update", deal=deal, **fields)

    def move_lead(self, lead: Optional[str], stage: str) -> dict:
        return self._post("/voice/leads/move", lead=lead, stage=stage)


class OfflineBackend:
    """Fixed sample figures with the same interface as CrmBackend."""

    def count(self, entity_type: str, period: str) -> int:
        return 12

    def pipeline_value(self) -> float:
        return 325000.0

    def closing(self, period: str) -> dict:
        return {"count": 4, "value": 86000}

    def top(self, entity_type: str, sort: str) -> dict:
        return {"id": "acme", "name": "Acme Corporation", "score": 92, "value": 48000}

    def summary(self, period: str) -> dict:
        return {"tasks": 5, "calls": 3, "deals": 2}

    def performance(self, period: str) -> dict:
        return {"percentage": 85, "closed_value": 127000}

    def create_task(self, description: Optional[str], due=None) -> dict:
        return {"id": "offline", "description": description, "due": _jsonable(due)}

    def create_note(self, content: str, record_id: Optional[str] = None) -> dict:
        return {"id": "offline", "content": content, "record_id": record_id}

    def update_deal(self, deal: str, **fields) -> dict:
        return {"deal": deal, **{k: _jsonable(v) for k, v in fields.items()}}

    def move_lead(self, lead: Optional[str], stage: str) -> dict:
        return {"lead": lead, "stage": stage}


OFFLINE_BACKEND = OfflineBackend()
