import os

DEFAULT_API_VERSION = "2025-04"

METAFIELD_NAMESPACE = "cad"
METAFIELD_KEY = "customer_products"


def _shop_domain(raw):
    if not raw:
        return None
    return raw.replace("https://", "").replace("http://", "").rstrip("/")


def load_config() -> dict:
    """Read the service settings from the environment (call after load_dotenv)."""
    return {
        "api_version": os.getenv("API_VERSION", DEFAULT_API_VERSION),
        "api_secret_key": os.getenv("API_SECRET_KEY"),
        "port": int(os.getenv("PORT", "3000")),
        "env": os.getenv("APP_ENV", "production").lower(),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "timeout": float(os.getenv("HTTP_TIMEOUT", "25")),
        "shop": {
            "domain": _shop_domain(os.getenv("SHOPIFY_SHOP")),
            "token": os.getenv("SHOPIFY_ADMIN_API_ACCESS_TOKEN"),
            "api_key": os.getenv("SHOPIFY_API_KEY"),
            "api_secret": os.getenv("SHOPIFY_API_SECRET"),
        },
    }
