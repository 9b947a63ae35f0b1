import json

import pytest

from favorites_sync import create_app
from favorites_sync.errors import NotFoundError, UpstreamError

API_KEY = "test-secret"


class FakeShopifyClient:
    """In-memory stand-in for ShopifyClient."""

    def __init__(self):
        self.metafields = {}      # customer_id -> metafield dict
        self.products = {}        # product_id -> product dict
        self.failing_products = set()
        self.missing_customers = set()
        self.fail_reads = False
        self.calls = []
        self._next_id = 1000

    def _check_customer(self, customer_id):
        if str(customer_id) in self.missing_customers:
            raise NotFoundError(f"Customer {customer_id} not found")

    def get_customer_metafield(self, customer_id, namespace="cad", key="customer_products"):
        self.calls.append(("get_metafield", str(customer_id)))
        self._check_customer(customer_id)
        if self.fail_reads:
            raise UpstreamError("GET metafields failed 502: bad gateway", status=502)
        return self.metafields.get(str(customer_id))

    def create_customer_metafield(self, customer_id, value, namespace="cad", key="customer_products"):
        self.calls.append(("create_metafield", str(customer_id)))
        self._check_customer(customer_id)
        self._next_id += 1
        mf = {
            "id": self._next_id, "namespace": namespace, "key": key,
            "type": "json", "value": json.dumps(value),
        }
        self.metafields[str(customer_id)] = mf
        return mf

    def update_customer_metafield(self, customer_id, metafield_id, value):
        self.calls.append(("update_metafield", str(customer_id), metafield_id))
        self._check_customer(customer_id)
        mf = dict(self.metafields[str(customer_id)], value=json.dumps(value))
        self.metafields[str(customer_id)] = mf
        return mf

    def get_product(self, product_id, fields="id,variants"):
        self.calls.append(("get_product", str(product_id)))
        if str(product_id) in self.failing_products:
            raise UpstreamError(f"GET product {product_id} failed 500: boom", status=500)
        return self.products.get(str(product_id))

    def stored_record(self, customer_id):
        return json.loads(self.metafields[str(customer_id)]["value"])


@pytest.fixture
def config():
    return {
        "api_version": "2025-04",
        "api_secret_key": API_KEY,
        "port": 3000,
        "env": "production",
        "log_level": "INFO",
        "timeout": 5,
        "shop": {"domain": "example.myshopify.com", "token": "shpat_test"},
    }


@pytest.fixture
def fake_client():
    return FakeShopifyClient()


@pytest.fixture
def app(config, fake_client):
    return create_app(config=config, client=fake_client)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    return {"x-api-key": API_KEY}
