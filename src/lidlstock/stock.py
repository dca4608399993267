from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from lidlstock.models import StockObservation, StockStatus, Store

LOG = logging.getLogger(__name__)

STATUS_FIELD = "storeAvailabilityIndicator"


class StockQueryError(RuntimeError):
    pass


def classify_status(raw: object) -> StockStatus:
    if raw == "AVAILABLE":
        return StockStatus.AVAILABLE
    if raw == "LOW_STOCK":
        return StockStatus.LOW_STOCK
    if raw == "UNKNOWN":
        return StockStatus.UNKNOWN
    return StockStatus.NOT_AVAILABLE


@dataclass(slots=True)
class StockReport:
    observations: list[StockObservation] = field(default_factory=list)
    missing_store_ids: list[str] = field(default_factory=list)
    has_data: bool = True

    @property
    def in_stock(self) -> list[Store]:
        return [obs.store for obs in self.observations if obs.status.in_stock]


def build_stock_report(payload: Any, stores: list[Store]) -> StockReport:
    """Classify a raw stock response against the active store set.

    Entries for stores outside `stores` are dropped. Stores in `stores` that
    the response does not mention get no observation and are listed in
    `missing_store_ids`.
    """
    if not isinstance(payload, list) or not payload:
        return StockReport(has_data=False)

    by_id = {store.store_id: store for store in stores}
    observations: list[StockObservation] = []
    seen: set[str] = set()
    for entry in payload:
        if not isinstance(entry, dict):
            continue
        store_id = str(entry.get("storeId"))
        store = by_id.get(store_id)
        if store is None:
            LOG.debug("dropping stock entry for unknown store %s", store_id)
            continue
        seen.add(store_id)
        observations.append(
            StockObservation(store=store, status=classify_status(entry.get(STATUS_FIELD)))
        )

    missing = [store.store_id for store in stores if store.store_id not in seen]
    return StockReport(observations=observations, missing_store_ids=missing)


class StockAvailabilityClient:
    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def fetch(self, product_id: str, store_ids: list[str]) -> Any:
        url = f"{self.base_url}{product_id}?storeids={','.join(store_ids)}"
        LOG.debug("querying stock product=%s stores=%d", product_id, len(store_ids))
        try:
            response = self.session.get(url, timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise StockQueryError(f"Failed to fetch product availability: {exc}") from exc
        if not response.ok:
            raise StockQueryError(
                f"Failed to fetch product availability ({response.status_code})"
            )
        try:
            return response.json()
        except ValueError:
            LOG.warning("stock endpoint returned a non-JSON body for product %s", product_id)
            return None

    def query(self, product_id: str, stores: list[Store]) -> StockReport:
        payload = self.fetch(product_id, [store.store_id for store in stores])
        report = build_stock_report(payload, stores)
        if report.missing_store_ids:
            LOG.debug("no stock entry for stores %s", ", ".join(report.missing_store_ids))
        return report
