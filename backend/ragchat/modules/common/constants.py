"""Common constants used across the application."""

from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from .exceptions import (
    DomainError,
    ExternalServiceError,
    ResourceExistsError,
    ResourceNotFoundError,
    ValidationError,
)

EXCEPTION_MAPPING: Dict[Type[DomainError], Callable[[str], HTTPException]] = {
    ResourceNotFoundError: lambda message: HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=message),
    ResourceExistsError: lambda message: HTTPException(status_code=status.HTTP_409_CONFLICT, detail=message),
    ValidationError: lambda message: HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=message),
    ExternalServiceError: lambda message: HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=message),
}

FALLBACK_MESSAGE = "I cannot reply at this time. Reach out to the team on Discord"
APOLOGY_MESSAGE = "I apologize, but I couldn't generate a response. Please try asking your question again."
