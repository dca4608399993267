from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StockStatus(str, Enum):
    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    UNKNOWN = "unknown"
    NOT_AVAILABLE = "not_available"

    @property
    def in_stock(self) -> bool:
        return self in (StockStatus.AVAILABLE, StockStatus.LOW_STOCK)

    @property
    def is_low(self) -> bool:
        return self is StockStatus.LOW_STOCK


class Store(BaseModel):
    model_config = ConfigDict(extra="ignore")

    store_id: str
    address: str
    postal_code: str = ""
    lat: float | None = None
    lon: float | None = None
    amenities: list[str] = Field(default_factory=list)

    @field_validator("store_id", "postal_code", mode="before")
    @classmethod
    def _coerce_str(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return value


class Variant(BaseModel):
    """One purchasable SKU as exposed in the product page state.

    The page uses different field names depending on the product type, so both
    identifier fields and all three title fields are optional.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    erp_number: str | None = Field(default=None, alias="erpNumber")
    article_id: str | None = Field(default=None, alias="articleId")
    full_title: str | None = Field(default=None, alias="fullTitle")
    product_title: str | None = Field(default=None, alias="productTitle")

    @field_validator("erp_number", "article_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def variant_id(self) -> str | None:
        return self.erp_number or self.article_id

    @property
    def display_title(self) -> str:
        for candidate in (self.full_title, self.product_title, self.erp_number):
            if candidate:
                return candidate
        return ""


class ProductReference(BaseModel):
    product_id: str
    title: str
    variants: list[Variant] = Field(default_factory=list)

    def purchasable_variants(self) -> list[Variant]:
        if self.variants:
            return list(self.variants)
        return [
            Variant(
                erp_number=self.product_id,
                article_id=self.product_id,
                full_title=self.title,
            )
        ]


class StockObservation(BaseModel):
    store: Store
    status: StockStatus


class AppConfig(BaseModel):
    maps_host: str | None = None
    maps_api_key: str | None = None
    stock_api: str = Field(min_length=1)
    store_cache: Path = Path("stores.json")
    timeout_seconds: float = Field(default=15.0, gt=0)
    headless: bool = True
