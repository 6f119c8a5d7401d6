"""Error taxonomy for the Noise client.

Two channels are kept apart on every error:

- TRANSPORT: the request never produced a usable response (network failure,
  malformed or undecodable body).
- DOMAIN: the server answered and rejected the call (bad credentials, generic
  server failure, a human-readable reason).

Callers display `str(error)`; it is always the user-visible text.
"""

from enum import Enum


class ErrorChannel(str, Enum):
    TRANSPORT = "transport"
    DOMAIN = "domain"

    def __str__(self) -> str:
        return self.value


class ApiErrorCode(str, Enum):
    E_INVALID_CREDENTIALS = "E_INVALID_CREDENTIALS"
    E_INVALID_RESPONSE = "E_INVALID_RESPONSE"
    E_SERVER_ERROR = "E_SERVER_ERROR"
    E_MESSAGE = "E_MESSAGE"

    def __str__(self) -> str:
        return self.value


class APIClientError(Exception):
    """Base class for every failure surfaced by NoiseApiClient."""

    errcode: ApiErrorCode = ApiErrorCode.E_SERVER_ERROR
    channel: ErrorChannel = ErrorChannel.DOMAIN
    default_message: str = "Something went wrong. Please try again."

    def __init__(self, errmesg: str | None = None, *, status_code: int | None = None):
        self.errmesg = errmesg or self.default_message
        self.status_code = status_code
        super().__init__(self.errmesg)

    @property
    def is_transport(self) -> bool:
        return self.channel == ErrorChannel.TRANSPORT

    def __repr__(self) -> str:
        return f"{type(self).__name__}(errcode={self.errcode}, errmesg={self.errmesg!r}, status_code={self.status_code})"


class InvalidCredentials(APIClientError):
    """Authentication rejected, or the session token is missing or invalidated."""

    errcode = ApiErrorCode.E_INVALID_CREDENTIALS
    default_message = "Invalid email or password."


class InvalidResponse(APIClientError):
    """Transport failure or a response body that could not be decoded."""

    errcode = ApiErrorCode.E_INVALID_RESPONSE
    channel = ErrorChannel.TRANSPORT
    default_message = "Unable to process server response."


class ServerError(APIClientError):
    errcode = ApiErrorCode.E_SERVER_ERROR


class MessageError(APIClientError):
    """The server supplied a human-readable failure reason; shown verbatim."""

    errcode = ApiErrorCode.E_MESSAGE

    def __init__(self, errmesg: str, *, status_code: int | None = None):
        super().__init__(errmesg, status_code=status_code)


class FieldError(Exception):
    """Inline validation error for a single settings field."""

    def __init__(self, field: str, errmesg: str):
        self.field = field
        self.errmesg = errmesg
        super().__init__(errmesg)


class LiveStreamingError(Exception):
    """Base class for failures joining the live video channel."""

    default_message = "Joining the live stream failed."

    def __init__(self, errmesg: str | None = None):
        self.errmesg = errmesg or self.default_message
        super().__init__(self.errmesg)


class SdkUnavailable(LiveStreamingError):
    default_message = "Live video engine is not available in this build."


class MissingAppId(LiveStreamingError):
    default_message = "Live video app ID is missing from the app configuration."


class InvalidUid(LiveStreamingError):
    default_message = "The live video user identifier is invalid."


class JoinFailed(LiveStreamingError):
    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Joining the live stream failed with code {code}.")


class JoinTimedOut(LiveStreamingError):
    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"The live stream did not confirm the join within {timeout:g} seconds.")
