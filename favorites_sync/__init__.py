import sys
import logging
from datetime import datetime, timezone

from flask import Flask, jsonify
from flask_cors import CORS
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from .config import load_config
from .errors import FavoritesError
from .utils import logger as log


def create_app(config=None, client=None):
    load_dotenv()
    config = config or load_config()

    app = Flask(__name__)
    app.config["FAVORITES"] = config
    CORS(app)

    # =========================================================
    # Configure logging so logs show up under gunicorn
    # (app.logger is the "favorites_sync" logger used by utils.logger)
    # =========================================================
    gunicorn_error = logging.getLogger("gunicorn.error")
    app.logger.handlers = list(gunicorn_error.handlers)
    log.set_level(config.get("log_level") or "INFO")

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(logging.DEBUG)
    sh.setFormatter(logging.Formatter("[%(asctime)s][%(levelname)s] %(message)s", "%H:%M:%S"))
    app.logger.addHandler(sh)

    shop = config.get("shop") or {}
    log.info(
        f"Environment check: port={config.get('port')} shop={shop.get('domain')} "
        f"api_secret_key={'Set' if config.get('api_secret_key') else 'Not Set'}"
    )

    # =========================================================
    # Shopify client
    # =========================================================
    if client is None:
        from .clients.shopify import ShopifyClient
        client = ShopifyClient.from_config(config)
    app.extensions["shopify_client"] = client

    # =========================================================
    # Blueprints
    # =========================================================
    from .routes.favorites import bp as favorites_bp

    app.register_blueprint(favorites_bp, url_prefix="/api")

    # =========================================================
    # Health check
    # =========================================================
    @app.get("/ping")
    def ping():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}, 200

    # =========================================================
    # Errors
    # =========================================================
    @app.errorhandler(FavoritesError)
    def handle_favorites_error(e):
        return jsonify({"success": False, "message": e.message}), e.status_code

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "message": e.description}), e.code
        app.logger.exception("Unhandled error")
        body = {"success": False, "message": "Internal server error"}
        if config.get("env") == "development":
            body["error"] = str(e)
        return jsonify(body), 500

    return app
