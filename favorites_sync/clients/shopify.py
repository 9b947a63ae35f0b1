import json
from typing import Optional

import requests

from ..config import DEFAULT_API_VERSION, METAFIELD_NAMESPACE, METAFIELD_KEY
from ..errors import ConfigurationError, NotFoundError, UpstreamError
from ..utils.logger import debug, error


def admin_base(domain: str, api_version: str = DEFAULT_API_VERSION) -> str:
    return f"https://{domain}/admin/api/{api_version}"

def rest_headers(token: str) -> dict:
    return {"Content-Type": "application/json", "X-Shopify-Access-Token": token}


class ShopifyClient:
    """Admin REST calls for customer metafields and products of one shop."""

    def __init__(self, domain: Optional[str], token: Optional[str],
                 api_version: str = DEFAULT_API_VERSION, timeout: float = 25):
        self.domain = domain
        self.token = token
        self.api_version = api_version
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: dict) -> "ShopifyClient":
        shop = config.get("shop") or {}
        return cls(
            shop.get("domain"),
            shop.get("token"),
            api_version=config.get("api_version", DEFAULT_API_VERSION),
            timeout=config.get("timeout", 25),
        )

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        if not (self.domain and self.token):
            error("[shopify] missing SHOPIFY_SHOP or SHOPIFY_ADMIN_API_ACCESS_TOKEN")
            raise ConfigurationError("Server configuration error")

        url = f"{admin_base(self.domain, self.api_version)}/{path}"
        debug(f"[shopify] {method} {url}")
        try:
            return requests.request(method, url, headers=rest_headers(self.token),
                                    timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            error(f"[shopify] {method} {path} failed: {e}")
            raise UpstreamError(f"Shopify request failed: {e}") from e

    @staticmethod
    def _raise_for(r: requests.Response, what: str):
        error(f"[shopify] {what} failed: {r.status_code} {r.text}")
        raise UpstreamError(f"{what} failed {r.status_code}: {r.text}", status=r.status_code)

    @staticmethod
    def _json(r: requests.Response, what: str) -> dict:
        try:
            body = r.json()
        except ValueError as e:
            error(f"[shopify] {what} returned invalid JSON: {r.status_code} {r.text[:200]}")
            raise UpstreamError(f"{what} returned invalid JSON", status=r.status_code) from e
        return body if isinstance(body, dict) else {}

    # -----------------------------------------------------
    # Customer metafields
    # -----------------------------------------------------

    def get_customer_metafield(self, customer_id: str | int,
                               namespace: str = METAFIELD_NAMESPACE,
                               key: str = METAFIELD_KEY) -> Optional[dict]:
        r = self._request("GET", f"customers/{customer_id}/metafields.json",
                          params={"namespace": namespace, "key": key})
        if r.status_code == 404:
            raise NotFoundError(f"Customer {customer_id} not found")
        if r.status_code != 200:
            self._raise_for(r, f"GET metafields for customer {customer_id}")

        # the filter is a hint only; match on namespace/key ourselves
        for mf in self._json(r, f"GET metafields for customer {customer_id}").get("metafields", []) or []:
            if mf.get("namespace") == namespace and mf.get("key") == key:
                return mf
        return None

    def create_customer_metafield(self, customer_id: str | int, value: dict,
                                  namespace: str = METAFIELD_NAMESPACE,
                                  key: str = METAFIELD_KEY) -> dict:
        payload = {"metafield": {
            "namespace": namespace, "key": key, "type": "json",
            "value": json.dumps(value),
        }}
        r = self._request("POST", f"customers/{customer_id}/metafields.json", json=payload)
        if r.status_code == 404:
            raise NotFoundError(f"Customer {customer_id} not found")
        if r.status_code not in (200, 201):
            self._raise_for(r, f"POST metafield for customer {customer_id}")
        return self._json(r, f"POST metafield for customer {customer_id}").get("metafield")

    def update_customer_metafield(self, customer_id: str | int, metafield_id: str | int,
                                  value: dict) -> dict:
        payload = {"metafield": {"id": metafield_id, "value": json.dumps(value)}}
        r = self._request("PUT", f"customers/{customer_id}/metafields/{metafield_id}.json",
                          json=payload)
        # 404 here can mean the metafield was removed after it was read
        if r.status_code not in (200, 201):
            self._raise_for(r, f"PUT metafield {metafield_id} for customer {customer_id}")
        return self._json(r, f"PUT metafield {metafield_id} for customer {customer_id}").get("metafield")

    # -----------------------------------------------------
    # Products
    # -----------------------------------------------------

    def get_product(self, product_id: str | int, fields: str = "id,variants") -> Optional[dict]:
        r = self._request("GET", f"products/{product_id}.json", params={"fields": fields})
        if r.status_code == 404:
            return None
        if r.status_code != 200:
            self._raise_for(r, f"GET product {product_id}")
        return self._json(r, f"GET product {product_id}").get("product")
