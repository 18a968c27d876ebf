"""Exception classes for pysoundtouch library."""


class SoundTouchError(Exception):
    """Base exception for all SoundTouch errors."""


class SoundTouchRequestError(SoundTouchError):
    """Raised when there is an error communicating with the SoundTouch device.

    Carries the endpoint and underlying error for better user feedback.
    """

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        host: str | None = None,
        last_error: Exception | None = None,
    ) -> None:
        """Initialize request error with context.

        Args:
            message: The error message
            endpoint: API endpoint that failed
            host: Device address the request was sent to
            last_error: The underlying exception that caused this error
        """
        self.endpoint = endpoint
        self.host = host
        self.last_error = last_error
        super().__init__(message)

    def __str__(self) -> str:
        """String representation with context."""
        context_parts = []
        if self.host:
            context_parts.append(f"host={self.host}")
        if self.endpoint:
            context_parts.append(f"endpoint={self.endpoint}")
        if context_parts:
            return f"{super().__str__()} ({', '.join(context_parts)})"
        return super().__str__()


class SoundTouchResponseError(SoundTouchError):
    """Raised when the SoundTouch device returns an error response."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status: int | None = None,
    ) -> None:
        """Initialize response error.

        Args:
            message: The error message
            endpoint: API endpoint that failed
            status: HTTP status code returned by the device
        """
        self.endpoint = endpoint
        self.status = status
        super().__init__(message)

    def __str__(self) -> str:
        context_parts = []
        if self.endpoint:
            context_parts.append(f"endpoint={self.endpoint}")
        if self.status is not None:
            context_parts.append(f"status={self.status}")
        if context_parts:
            return f"{super().__str__()} ({', '.join(context_parts)})"
        return super().__str__()


class SoundTouchTimeoutError(SoundTouchRequestError):
    """Raised when a request to the SoundTouch device times out."""


class SoundTouchConnectionError(SoundTouchRequestError):
    """Raised on network-level connectivity problems such as refused or unreachable hosts."""


class SoundTouchInvalidDataError(SoundTouchError):
    """The device responded with malformed XML."""


class InvalidParameterError(SoundTouchError, ValueError):
    """An argument is outside the range the device accepts (volume, preset)."""


class DeviceNotFoundError(SoundTouchError):
    """A named device is not present in the configured device list."""


class InvalidSubnetFormatError(SoundTouchError, ValueError):
    """A subnet string could not be parsed (bad CIDR, short form or prefix)."""


class NoSubnetDetectedError(SoundTouchError):
    """No usable IPv4 interface was found to derive the host subnet from."""


class PersistenceError(SoundTouchError):
    """The configuration document could not be read or written."""
