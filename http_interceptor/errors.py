class HttpClientError(Exception):
    """Base class for errors raised by the interceptor client."""


class InvalidArgumentError(HttpClientError, ValueError):
    """A request could not be built from the given arguments."""


class RequestTimeoutError(HttpClientError, TimeoutError):
    def __init__(self, url: str, timeout: float):
        super().__init__(f"Request to {url} timed out after {timeout}s.")
        self.url = url
        self.timeout = timeout


class HttpStatusError(HttpClientError):
    def __init__(self, url: str, status_code: int, reason_phrase: str | None = None):
        message = f"Request to {url} failed with status {status_code}"
        if reason_phrase:
            message = f"{message}: {reason_phrase}"
        super().__init__(f"{message}.")
        self.url = url
        self.status_code = status_code
        self.reason_phrase = reason_phrase
