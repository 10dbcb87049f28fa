"""
Инфраструктурный слой конвертера.

Содержит адаптеры (XML builder) и менеджер файлов.
"""

from .file_manager import TxtFileManager

__all__ = [
    "TxtFileManager",
]
