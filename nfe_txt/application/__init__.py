"""
Application слой конвертера.

Содержит фабрику для создания и сборки компонентов.
"""

from .factory import ConverterComponentFactory

__all__ = [
    "ConverterComponentFactory",
]
