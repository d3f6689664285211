"""Service layer — read-side logic over the result store."""


class ServiceError(Exception):
    """Base service exception."""


class NotFoundError(ServiceError):
    """Resource not found (-> HTTP 404)."""
