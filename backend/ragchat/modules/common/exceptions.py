"""Domain exception classes for business logic and upstream errors."""


class DomainError(Exception):
    """Base class for all domain-specific errors."""

    pass


class ResourceNotFoundError(DomainError):
    """Raised when a requested resource cannot be found."""

    pass


class ResourceExistsError(DomainError):
    """Raised when attempting to create a resource that already exists."""

    pass


class ValidationError(DomainError):
    """Raised when data validation fails."""

    pass


class EmbeddingAlreadyLinkedError(ResourceExistsError):
    """Raised when a chunk that already has an embedding would be relinked."""

    pass


class ExternalServiceError(DomainError):
    """Base class for failures of the MiniMax APIs."""

    pass


class HttpError(ExternalServiceError):
    """Raised when an external API answers with a non-success HTTP status."""

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(message or f"HTTP error! status: {status_code}")


class ExternalApiError(ExternalServiceError):
    """Raised when an external API reports an error inside a successful response."""

    def __init__(self, status_code: int, status_msg: str):
        self.status_code = status_code
        self.status_msg = status_msg
        super().__init__(f"API error: {status_code} - {status_msg}")


class EmptyResponseError(ExternalServiceError):
    """Raised when a reply stream ends without a single stream event."""

    pass


class JsonParseError(DomainError):
    """Raised for a stream event whose payload is not valid JSON.

    The chat stream recovers from it locally by skipping the line.
    """

    def __init__(self, payload: str, reason: str):
        self.payload = payload
        super().__init__(f"Invalid JSON in stream event: {reason}")


class NetworkError(ExternalServiceError):
    """Raised when an external API can't be reached or the connection breaks."""

    pass
