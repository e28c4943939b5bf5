"""Errors raised by the service layer."""


class ServiceError(Exception):
    """Base class for failures of a service operation."""


class NotFoundError(ServiceError):
    """A requested work, student or assignment does not exist."""


class ConflictError(ServiceError):
    """The operation conflicts with existing data."""


class InvalidStatusError(ServiceError):
    """A work status outside the known set was given."""