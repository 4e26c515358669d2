"""Error types raised by the works-search client."""


class InvalidArgument(ValueError):
    """Caller input rejected before any request is sent."""


class SearchFailed(RuntimeError):
    """A works search could not be completed.

    Every network-era failure is raised as a subclass of this, with the
    underlying exception (if any) chained as ``__cause__``.
    """


class RequestFailed(SearchFailed):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str, url: str):
        self.status_code = status_code
        self.body = body
        self.url = url
        super().__init__(
            f"OpenAlex API request failed with status {status_code} for URL {url}: {body}"
        )


class DecodeFailed(SearchFailed):
    """The response body is not a valid works page."""


class TransportFailed(SearchFailed):
    """The request never produced a response (connection error, timeout)."""


def describe_validation_error(exc) -> str:
    """One-line summary of the first error in a pydantic ValidationError."""
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", str(exc))
    return f"{field}: {message}" if field else message
