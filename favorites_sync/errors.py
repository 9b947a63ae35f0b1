class FavoritesError(Exception):
    """Base error; `status_code` is the HTTP status the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FavoritesError):
    status_code = 400


class AuthError(FavoritesError):
    status_code = 403


class ConfigurationError(FavoritesError):
    status_code = 500


class NotFoundError(FavoritesError):
    status_code = 404


class UpstreamError(FavoritesError):
    """A Shopify call failed. `status` is the remote HTTP status when there was one."""

    status_code = 500

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status
