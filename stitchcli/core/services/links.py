"""User-facing links into the Stitch Labs web app."""

from typing import Any, Mapping, Optional

CONSUMER_URL_TEMPLATE = "https://{consumer}.stitchlabs.com/inventory/{product_id}/variants/{variant_id}"


def _first_product_id(record: Mapping[str, Any]) -> Optional[Any]:
    links = record.get("links")
    if not isinstance(links, Mapping):
        return None
    products = links.get("Products")
    if not isinstance(products, list) or not products:
        return None
    first = products[0]
    if not isinstance(first, Mapping):
        return None
    return first.get("id")


def variant_url(record: Mapping[str, Any], consumer_url: Optional[str]) -> Optional[str]:
    """Builds the inventory page URL of a variant record.

    Returns None when no consumer subdomain is configured or the record
    lacks `id` or `links.Products[0].id`.
    """
    if not consumer_url or not isinstance(record, Mapping):
        return None
    product_id = _first_product_id(record)
    variant_id = record.get("id")
    if product_id is None or variant_id is None:
        return None
    return CONSUMER_URL_TEMPLATE.format(consumer=consumer_url, product_id=product_id, variant_id=variant_id)
