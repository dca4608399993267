from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import quote, urlencode

import requests

from lidlstock.models import Store

LOG = logging.getLogger(__name__)

MAX_STORES = 5000
ADDRESS_TYPE_FILTER = "Adresstyp eq 1"
AMENITY_FIELD_COUNT = 41

AMENITY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "eCharger": "Electric Car Charger",
        "hotDrinks": "Hot Drinks",
        "garage": "Parking Garage",
        "freeWiFi": "Free Wi-Fi",
        "parking": "Parking",
        "disParking": "Disabled Parking",
    }
)


class StoreDirectoryError(RuntimeError):
    pass


def parse_amenities(entry: Mapping[str, Any]) -> list[str]:
    amenities = []
    for i in range(1, AMENITY_FIELD_COUNT + 1):
        code = entry.get(f"INFOICON{i}")
        if code:
            amenities.append(AMENITY_LABELS.get(code, code))
    return amenities


def parse_store(entry: Mapping[str, Any]) -> Store:
    postal_code = entry.get("PostalCode") or ""
    return Store(
        store_id=entry.get("EntityID"),
        address=f"{entry.get('AddressLine')}, {postal_code} {entry.get('Locality')}",
        postal_code=postal_code,
        lat=entry.get("Latitude"),
        lon=entry.get("Longitude"),
        amenities=parse_amenities(entry),
    )


def filter_by_postal_code(stores: list[Store], code: str) -> list[Store]:
    if not code:
        return list(stores)
    return [store for store in stores if code in store.postal_code]


class StoreDirectory:
    """Local snapshot of the store directory.

    `refresh` is the only method that touches the network; it replaces the
    snapshot file wholesale once the whole response has been parsed.
    """

    def __init__(
        self,
        cache_path: str | Path,
        maps_host: str | None = None,
        api_key: str | None = None,
        timeout_seconds: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.cache_path = Path(cache_path)
        self.maps_host = maps_host
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def _query_url(self) -> str:
        params = {
            "key": self.api_key,
            "$filter": ADDRESS_TYPE_FILTER,
            "$format": "json",
            "$top": MAX_STORES,
        }
        return f"{self.maps_host}?{urlencode(params, quote_via=quote, safe='$')}"

    def refresh(self) -> list[Store]:
        if not self.maps_host or not self.api_key:
            raise StoreDirectoryError("Missing environment variables: MAPS_HOST or MAPS_API_KEY")

        LOG.debug("fetching store directory from %s", self.maps_host)
        try:
            response = self.session.get(self._query_url(), timeout=self.timeout_seconds)
        except requests.RequestException as exc:
            raise StoreDirectoryError(f"Failed to fetch Lidl stores: {exc}") from exc
        if not response.ok:
            raise StoreDirectoryError(
                f"Failed to fetch Lidl stores: HTTP error {response.status_code} {response.reason}"
            )

        try:
            results = response.json()["d"]["results"]
            stores = [parse_store(entry) for entry in results]
        except (ValueError, KeyError, TypeError) as exc:
            raise StoreDirectoryError(f"unexpected store directory response: {exc}") from exc

        self._write(stores)
        LOG.info("cached %d stores in %s", len(stores), self.cache_path)
        return stores

    def load(self) -> list[Store] | None:
        if not self.cache_path.exists():
            return None
        try:
            payload = json.loads(self.cache_path.read_text(encoding="utf-8"))
            return [Store.model_validate(entry) for entry in payload]
        except (ValueError, TypeError) as exc:
            raise StoreDirectoryError(f"unreadable store cache {self.cache_path}: {exc}") from exc

    def load_or_refresh(self) -> list[Store]:
        stores = self.load()
        if stores is None:
            LOG.warning("store list not cached, fetching now")
            stores = self.refresh()
        return stores

    def _write(self, stores: list[Store]) -> None:
        payload = [store.model_dump() for store in stores]
        self.cache_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
