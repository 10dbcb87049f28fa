"""
Domain слой конвертера TXT -> NFe.

Содержит интерфейсы (абстрактные классы) и исключения.
"""

from .interfaces import (
    INFeXmlBuilder,
    IDocumentValidator,
    IDocumentParser,
    INFeConverter,
)

from .exceptions import (
    ConversionError,
    LayoutLoadError,
    BatchFormatError,
    EmptyContentError,
    BatchHeaderError,
    DocumentCountMismatchError,
    DocumentParseError,
    MissingTerminatorError,
    UnknownTagError,
    FieldCountMismatchError,
    MissingRequiredSectionError,
    DocumentValidationError,
    DocumentBuildError,
    AllConversionsFailedError,
    ConversionFileError,
)

__all__ = [
    # Интерфейсы
    "INFeXmlBuilder",
    "IDocumentValidator",
    "IDocumentParser",
    "INFeConverter",

    # Исключения
    "ConversionError",
    "LayoutLoadError",
    "BatchFormatError",
    "EmptyContentError",
    "BatchHeaderError",
    "DocumentCountMismatchError",
    "DocumentParseError",
    "MissingTerminatorError",
    "UnknownTagError",
    "FieldCountMismatchError",
    "MissingRequiredSectionError",
    "DocumentValidationError",
    "DocumentBuildError",
    "AllConversionsFailedError",
    "ConversionFileError",
]
