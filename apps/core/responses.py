"""Translate domain errors into DRF responses."""

from rest_framework import status
from rest_framework.response import Response

from .exceptions import (
    DomainError,
    ValidationError,
    NotFoundError,
    AlreadyMemberError,
    NotAllowedError,
    PersistenceError,
)


ERROR_STATUS_CODES = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyMemberError, status.HTTP_409_CONFLICT),
    (NotAllowedError, status.HTTP_403_FORBIDDEN),
    (PersistenceError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def error_response(exc: DomainError) -> Response:
    """Build an ``{"error": ...}`` response with the status matching ``exc``."""
    for error_class, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_class):
            return Response({'error': str(exc)}, status=status_code)
    return Response({'error': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
