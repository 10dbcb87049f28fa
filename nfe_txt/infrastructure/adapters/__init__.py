"""
Адаптеры конвертера.

Реализации интерфейсов домена поверх внешних библиотек.
"""

from .lxml_builder_adapter import LxmlNFeBuilder, NFE_NAMESPACE

__all__ = [
    "LxmlNFeBuilder",
    "NFE_NAMESPACE",
]
