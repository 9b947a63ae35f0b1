# favorites_sync/services/favorites.py
import json
from typing import NamedTuple, Optional

from ..errors import UpstreamError, ValidationError
from ..utils.logger import debug, info, warn

# =========================================================
# Favorite inputs
# =========================================================

class ProductOnly(NamedTuple):
    product_id: str


class ProductVariant(NamedTuple):
    product_id: str
    variant_id: str


def _is_identifier(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip() != ""


def parse_favorites(favorites) -> list:
    """
    Normalize the request `favorites` array into ProductOnly / ProductVariant.

    Accepted items: a raw product id (string or integer) or an object with a
    `productId` and an optional `variantId`.
    """
    if not isinstance(favorites, list):
        raise ValidationError("Favorites must be an array")

    parsed = []
    for idx, fav in enumerate(favorites):
        if _is_identifier(fav):
            parsed.append(ProductOnly(str(fav).strip()))
            continue

        if not isinstance(fav, dict):
            raise ValidationError(
                f"favorites[{idx}] must be a product ID or an object with productId"
            )
        product_id = fav.get("productId")
        if not _is_identifier(product_id):
            raise ValidationError(f"favorites[{idx}] is missing productId")

        variant_id = fav.get("variantId")
        if variant_id is None or variant_id == "":
            parsed.append(ProductOnly(str(product_id).strip()))
        elif _is_identifier(variant_id):
            parsed.append(ProductVariant(str(product_id).strip(), str(variant_id).strip()))
        else:
            raise ValidationError(f"favorites[{idx}] has an invalid variantId")
    return parsed


def parse_sync_request(body) -> tuple[str, list]:
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")

    customer_id = body.get("customerId")
    favorites = body.get("favorites")
    if not _is_identifier(customer_id) or favorites is None:
        raise ValidationError("Missing required fields: customerId and favorites")
    return str(customer_id).strip(), parse_favorites(favorites)

# =========================================================
# Merge
# =========================================================

def empty_record() -> dict:
    return {"saved": {}, "viewed": "", "custom": {}}


def merge_favorites(existing: Optional[dict], incoming: list) -> dict:
    """Fold `incoming` favorites into a copy of `existing`.

    Variants are appended per product only when not already stored, so the
    per-product lists keep first-seen order. Entries without a variant are
    skipped.
    """
    existing = existing or {}
    stored = existing.get("saved")
    if not isinstance(stored, dict):
        stored = {}

    saved = {}
    for pid, vids in stored.items():
        variants = saved.setdefault(str(pid), [])
        if vids is None:
            vids = []
        elif not isinstance(vids, list):
            vids = [vids]
        for vid in vids:
            if str(vid) not in variants:
                variants.append(str(vid))

    for fav in incoming:
        variant_id = getattr(fav, "variant_id", None)
        if not variant_id:
            continue
        pid = str(fav.product_id)
        vid = str(variant_id)
        variants = saved.setdefault(pid, [])
        if vid not in variants:
            variants.append(vid)

    custom = existing.get("custom")
    return {
        "saved": saved,
        "viewed": existing.get("viewed") or "",
        "custom": dict(custom) if isinstance(custom, dict) else {},
    }

# =========================================================
# Variant resolution
# =========================================================

def resolve_first_variant(client, product_id: str) -> Optional[str]:
    """Return the id of the product's first variant, or None when it can't be found."""
    try:
        product = client.get_product(product_id)
    except UpstreamError as e:
        warn(f"[variant] error fetching product {product_id}: {e}")
        return None

    if not product:
        warn(f"[variant] product {product_id} not found")
        return None

    variants = product.get("variants") or []
    if not variants:
        warn(f"[variant] no variants found for product {product_id}")
        return None

    first = variants[0] or {}
    if not first.get("id"):
        warn(f"[variant] first variant missing or invalid for product {product_id}")
        return None

    variant_id = str(first["id"])
    debug(f"[variant] product {product_id} -> variant {variant_id}")
    return variant_id


def resolve_favorites(client, favorites: list) -> list:
    """Resolve ProductOnly entries to their first variant, one lookup per product."""
    resolved = []
    lookups = {}
    for fav in favorites:
        if isinstance(fav, ProductVariant):
            resolved.append(fav)
            continue
        if fav.product_id not in lookups:
            lookups[fav.product_id] = resolve_first_variant(client, fav.product_id)
        variant_id = lookups[fav.product_id]
        if variant_id:
            resolved.append(ProductVariant(fav.product_id, variant_id))
        else:
            resolved.append(fav)
    return resolved

# =========================================================
# Fetch / sync
# =========================================================

def _record_from_metafield(metafield: Optional[dict]) -> Optional[dict]:
    if not metafield:
        return None
    value = metafield.get("value")
    if isinstance(value, dict):
        return value
    try:
        record = json.loads(value)
    except (TypeError, ValueError) as e:
        raise UpstreamError(f"Stored favorites for metafield {metafield.get('id')} are not valid JSON") from e
    if not isinstance(record, dict):
        raise UpstreamError(f"Stored favorites for metafield {metafield.get('id')} are not an object")
    return record


def fetch_favorites(client, customer_id: str) -> Optional[dict]:
    return _record_from_metafield(client.get_customer_metafield(customer_id))


def sync_favorites(client, customer_id: str, favorites: list) -> dict:
    """Merge `favorites` into the customer's stored record and write it back.

    Read-then-write with no concurrency token: two syncs racing for one
    customer end with the last write.
    """
    metafield = client.get_customer_metafield(customer_id)
    existing = _record_from_metafield(metafield)

    info(f"[sync] customer {customer_id}: merging {len(favorites)} favorites "
         f"(existing record: {'yes' if metafield else 'no'})")

    merged = merge_favorites(existing, resolve_favorites(client, favorites))
    debug(f"[sync] merged result for customer {customer_id}: {json.dumps(merged)}")

    if metafield:
        updated = client.update_customer_metafield(customer_id, metafield["id"], merged)
        info(f"[sync] customer {customer_id}: updated metafield {metafield['id']}")
    else:
        updated = client.create_customer_metafield(customer_id, merged)
        info(f"[sync] customer {customer_id}: created metafield {(updated or {}).get('id')}")
    return updated
