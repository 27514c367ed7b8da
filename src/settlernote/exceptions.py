"""Custom exceptions for settlernote."""


class SettlernoteError(Exception):
    """Base exception for settlernote operations."""


class UnauthorizedError(SettlernoteError):
    """No valid session for the request."""


class PermissionDeniedError(SettlernoteError):
    """The signed-in user may not perform this operation."""


class DocumentNotFoundError(SettlernoteError):
    """Document (or user) does not exist or is archived."""


class ValidationError(SettlernoteError):
    """User supplied data was rejected; nothing was changed."""


class TransientNetworkError(SettlernoteError):
    """A request to the document service failed and may be resubmitted."""


class PositionError(SettlernoteError):
    """A document offset could not be resolved against the content tree."""
