# favorites_sync/routes/favorites.py
from flask import Blueprint, current_app, jsonify, request

from ..errors import FavoritesError
from ..services.favorites import fetch_favorites, parse_sync_request, sync_favorites
from ..utils.logger import error
from ..utils.security import require_api_key

bp = Blueprint("favorites", __name__)


def _client():
    return current_app.extensions["shopify_client"]


def _failure(e: FavoritesError, message: str):
    body = {"success": False, "message": message, "error": e.message}
    return jsonify(body), e.status_code


@bp.before_request
def check_api_key():
    if request.method == "OPTIONS":
        return None
    require_api_key(current_app.config["FAVORITES"].get("api_secret_key"))


@bp.get("/favorites/<customer_id>")
def get_favorites(customer_id):
    try:
        data = fetch_favorites(_client(), customer_id)
    except FavoritesError as e:
        error(f"[favorites] fetch failed for customer {customer_id}: {e}")
        if e.status_code == 404:
            return jsonify({"success": False, "message": e.message}), 404
        return _failure(e, "Failed to fetch favorites")
    return jsonify({"success": True, "data": data}), 200


@bp.post("/sync-favorites")
def post_sync_favorites():
    customer_id, favorites = parse_sync_request(request.get_json(silent=True))

    try:
        updated = sync_favorites(_client(), customer_id, favorites)
    except FavoritesError as e:
        error(f"[favorites] sync failed for customer {customer_id}: {e}")
        if e.status_code == 404:
            return jsonify({"success": False, "message": e.message}), 404
        return _failure(e, "Failed to sync favorites")

    return jsonify({
        "success": True,
        "message": "Favorites synced successfully",
        "updated": updated,
    }), 200
