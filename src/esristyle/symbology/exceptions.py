# src/esristyle/symbology/exceptions.py
"""
Symbology-related exceptions
"""

from typing import Optional


class StyleError(Exception):
    """Base exception for style translation errors"""

    pass


class MissingRendererError(StyleError):
    """Raised when a drawingInfo document carries no renderer"""

    def __init__(self, message: str = "renderer is not defined"):
        super().__init__(message)


class UnsupportedRendererKind(StyleError):
    """Raised for a renderer type that cannot be translated"""

    def __init__(self, kind: Optional[str]):
        self.kind = kind
        super().__init__(f'Renderer type "{kind}" is not implemented yet')


class UnsupportedSymbolKind(StyleError):
    """Raised for a symbol type that cannot be read"""

    def __init__(self, kind: Optional[str]):
        self.kind = kind
        super().__init__(f'Symbol type "{kind}" is not implemented yet')


class ImageDecodeFailure(StyleError):
    """Raised by pattern loaders when embedded picture bytes cannot be decoded"""

    pass


class RuleOrderError(StyleError):
    """Raised when a default rule would shadow conditional rules"""

    pass


class ServiceError(StyleError):
    """Raised when the map service cannot deliver a layer definition"""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)
