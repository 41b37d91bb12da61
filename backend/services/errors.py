"""Exceptions raised by the review pipeline and its collaborators."""


class ReviewError(Exception):
    """Base class for review pipeline failures."""


class ReviewValidationError(ReviewError):
    """Request is missing or has invalid fields. Raised before any external call."""


class ExternalServiceError(ReviewError):
    """An external collaborator (LLM, storage) failed. Fatal to the request."""


class LLMServiceError(ExternalServiceError):
    pass


class StorageError(ExternalServiceError):
    pass
