from typing import Optional, Dict, Any


class EventPassException(Exception):
    """Base exception for the event pass generator."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class TemplateAssetError(EventPassException):
    """Raised when the pass template cannot be used. Always fatal."""

    pass


class TemplateNotFoundError(TemplateAssetError):
    """Raised when the template file does not exist."""

    pass


class TemplateLoadError(TemplateAssetError):
    """Raised when the template file cannot be decoded as an image."""

    pass


class TemplateMismatchError(TemplateAssetError):
    """Raised when the template size doesn't match the layout canvas."""

    pass


class LayoutNotFoundError(EventPassException):
    """Raised when no layout is registered for the requested version."""

    pass


class BarcodeGenerationError(EventPassException):
    """Raised when the barcode payload cannot be encoded or rendered."""

    pass
