from __future__ import annotations

import logging
import re
from typing import Any, Callable

from pydantic import ValidationError

from lidlstock.adapters.base import PageStateRenderer
from lidlstock.models import ProductReference, Variant

LOG = logging.getLogger(__name__)

PRODUCT_ID_PATTERN = re.compile(r"p(\d+)")

RendererFactory = Callable[[], PageStateRenderer]


def extract_product_id(url: str) -> str | None:
    match = PRODUCT_ID_PATTERN.search(url)
    if match is None:
        return None
    return match.group(1)


def state_key(product_id: str) -> str:
    return f"&erp{product_id}"


def _parse_variants(raw: Any) -> list[Variant]:
    if isinstance(raw, dict):
        values = list(raw.values())
    elif isinstance(raw, list):
        values = raw
    else:
        return []

    variants = []
    for value in values:
        if not isinstance(value, dict):
            continue
        try:
            variants.append(Variant.model_validate(value))
        except ValidationError as exc:
            LOG.debug("skipping malformed variant %r: %s", value, exc)
    return variants


def extract_product_state(entry: Any, product_id: str) -> ProductReference | None:
    """Map the page state entry for one product onto a ProductReference.

    All assumptions about the shape of the injected page state live here.
    Returns None when the entry carries no title, which is how the page
    signals that the identifier does not belong to a real product.
    """
    if not isinstance(entry, dict):
        return None

    keyfacts = entry.get("keyfacts")
    title = keyfacts.get("fullTitle") if isinstance(keyfacts, dict) else None
    if not title or not isinstance(title, str):
        return None

    return ProductReference(
        product_id=product_id,
        title=title,
        variants=_parse_variants(entry.get("variants")),
    )


class ProductVariantResolver:
    def __init__(self, renderer_factory: RendererFactory) -> None:
        self.renderer_factory = renderer_factory

    def resolve(self, url: str) -> ProductReference | None:
        product_id = extract_product_id(url)
        if product_id is None:
            LOG.debug("no product id in %s", url)
            return None

        # One browser per call, closed on every exit path.
        with self.renderer_factory() as renderer:
            entry = renderer.render_state(url, state_key(product_id))

        product = extract_product_state(entry, product_id)
        if product is None:
            LOG.warning("no product data for id=%s", product_id)
        else:
            LOG.info("resolved product id=%s variants=%d", product_id, len(product.variants))
        return product
