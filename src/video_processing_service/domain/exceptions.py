"""Domain exceptions for the video processing service."""


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class BadTriggerError(DomainException):
    """Raised when a job trigger is malformed or lacks a source object id."""
    pass


class StorageError(DomainException):
    """Base for remote object store failures."""
    pass


class ObjectNotFoundError(StorageError):
    """Raised when the requested remote object does not exist."""
    pass


class TransferError(StorageError):
    """Raised when a fetch, upload, make-public or delete call fails."""
    pass


class PublicAccessError(TransferError):
    """Raised when an uploaded object could not be made publicly readable."""
    pass


class TransformError(DomainException):
    """Raised when the external transform cannot be run or reports failure."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid."""
    pass


class InvalidStateTransitionError(DomainException):
    """Raised when a job is moved backwards or out of a terminal state."""
    pass
