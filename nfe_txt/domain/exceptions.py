"""
Исключения для домена конвертации TXT -> NFe.

Уровни ошибок:
- файл целиком (пустой файл, заголовок NOTAFISCAL, количество документов)
- структура документа (неизвестный тег, количество полей, обязательные секции)
- сборка XML (ошибки внешнего builder)
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..s2_validation.stage import ValidationResult
    from ..pipeline import ConversionResult


class ConversionError(Exception):
    """Базовое исключение для ошибок домена конвертации."""

    def __init__(
        self,
        message: str,
        component: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.component = component
        self.original_error = original_error
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Conversion Error: {self.message}"
        if self.component:
            msg += f" (Component: {self.component})"
        if self.original_error:
            msg += f" [Original: {type(self.original_error).__name__}: {str(self.original_error)}]"
        return msg


class LayoutLoadError(ConversionError):
    """Описание layout не найдено или невалидно."""
    pass


# =============================================================================
# ОШИБКИ УРОВНЯ ФАЙЛА (фатальны для всего пакета)
# =============================================================================

class BatchFormatError(ConversionError):
    """Ошибка формата пакета TXT."""
    pass


class EmptyContentError(BatchFormatError):
    """Пустой TXT."""
    pass


class BatchHeaderError(BatchFormatError):
    """Отсутствует или некорректен заголовок NOTAFISCAL."""
    pass


class DocumentCountMismatchError(BatchFormatError):
    """Количество документов не совпадает с заголовком."""

    def __init__(self, expected: int, found: int, component: Optional[str] = None):
        self.expected = expected
        self.found = found
        super().__init__(
            message=f"NFe count mismatch: expected {expected}, found {found}",
            component=component
        )


# =============================================================================
# ОШИБКИ УРОВНЯ ДОКУМЕНТА
# =============================================================================

class DocumentParseError(ConversionError):
    """Структурная ошибка при парсинге документа (fail-fast)."""
    pass


class MissingTerminatorError(DocumentParseError):
    """Строка не заканчивается разделителем."""
    pass


class UnknownTagError(DocumentParseError):
    """Тег отсутствует в layout."""
    pass


class FieldCountMismatchError(DocumentParseError):
    """Количество полей строки не совпадает с layout."""
    pass


class MissingRequiredSectionError(DocumentParseError):
    """В документе нет обязательной секции."""
    pass


class DocumentValidationError(ConversionError):
    """Документ не прошёл валидацию. Содержит полный набор замечаний."""

    def __init__(self, result: "ValidationResult", component: Optional[str] = None):
        self.result = result
        messages = "; ".join(str(finding) for finding in result.errors)
        super().__init__(message=f"validation errors: {messages}", component=component)


class DocumentBuildError(ConversionError):
    """Ошибка сборки XML во внешнем builder."""
    pass


class AllConversionsFailedError(ConversionError):
    """Ни один документ пакета не сконвертирован."""

    def __init__(self, result: "ConversionResult", component: Optional[str] = None):
        self.result = result
        super().__init__(message="all conversions failed", component=component)


class ConversionFileError(ConversionError):
    """Ошибка файловой системы (чтение TXT, запись XML)."""
    pass
