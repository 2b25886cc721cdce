class ApiError(Exception):
    """Base class for failed calls to the shop backend."""


class RequestRejected(ApiError):
    """
    The backend answered with a non-2xx status.
    `text` is the raw response body, possibly empty.
    """

    def __init__(self, status_code: int, text: str = ""):
        super().__init__(f"HTTP {status_code}: {text}")
        self.status_code = status_code
        self.text = text


class NetworkError(ApiError):
    """The request never got an answer (connection refused, DNS, reset...)."""
