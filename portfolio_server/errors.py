"""Exception types for startup and per-request failures."""


class StartupError(Exception):
    """Fatal problem before the listener is serving."""


class ConfigurationError(StartupError):
    pass


class BindError(StartupError):
    pass


class RequestError(Exception):
    """A failure of a single request, surfaced as an HTTP status."""

    status_code = 500
    detail = "Internal Server Error"

    def __init__(self, path: str = "") -> None:
        super().__init__(path)
        self.path = path


class NotFoundError(RequestError):
    status_code = 404
    detail = "Not Found"


class AssetReadError(RequestError):
    status_code = 500
    detail = "Internal Server Error"
