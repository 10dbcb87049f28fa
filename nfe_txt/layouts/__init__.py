"""
Layouts: описания диалектов TXT.

LayoutConfig - неизменяемое описание (тег -> шаблон полей + параметры диалекта).
LayoutLoader - загрузка встроенных диалектов из YAML.
"""

from .layout_config import Layout, LayoutConfig, get_supported_layouts
from .layout_loader import LayoutLoader, load_layout

__all__ = [
    "Layout",
    "LayoutConfig",
    "LayoutLoader",
    "get_supported_layouts",
    "load_layout",
]
