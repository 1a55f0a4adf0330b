from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from app.features.lighthouse.schemas.lighthouse import DeliveryEnvelope
from app.platform.config import settings
from app.platform.exceptions import DeliveryError
from app.platform.logger import get_logger

logger = get_logger("collector_client")


class CollectorClient:
    """Single-shot delivery of finished reports to the collector API. Never retries."""

    def __init__(
        self,
        results_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.results_url = results_url or settings.collector_url
        self.client = client or httpx.AsyncClient(
            timeout=timeout if timeout is not None else settings.COLLECTOR_TIMEOUT
        )

    async def send(self, job_id: str, report: Dict[str, Any]) -> None:
        try:
            envelope = DeliveryEnvelope(
                job_id=job_id,
                report=report,
                delivered_at=datetime.now(timezone.utc),
            )
            response = await self.client.post(
                self.results_url,
                json=envelope.to_payload(),
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Collector timeout: {e!r}") from e
        except httpx.HTTPStatusError as e:
            raise DeliveryError(
                f"Collector responded {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise DeliveryError(f"Collector request failed: {e!r}") from e
        except (httpx.InvalidURL, ValueError, TypeError) as e:
            # Bad collector URL, or a report that cannot be encoded as JSON
            raise DeliveryError(f"Could not build collector request: {e!r}") from e

    async def aclose(self) -> None:
        await self.client.aclose()
