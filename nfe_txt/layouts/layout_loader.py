"""
Загрузчик описаний диалектов TXT из YAML файлов.

Структура директории:
layouts/
  ├── txtstructure400.yaml
  ├── txtstructure400_sebrae.yaml
  └── txtstructure310.yaml

Использует Pydantic для валидации структуры. Загруженные layout кешируются:
они неизменяемы и разделяются между всеми конвертерами.
"""

import yaml
from pathlib import Path
from typing import ClassVar, Dict, Optional, Tuple, Union
from loguru import logger
from pydantic import ValidationError

from config.settings import LAYOUTS_DIR
from .layout_config import LAYOUT_FILES, Layout, LayoutConfig
from ..domain.exceptions import LayoutLoadError


class LayoutLoader:
    """Загружает LayoutConfig из YAML файлов с валидацией через Pydantic."""

    _cache: ClassVar[Dict[Tuple[str, str], LayoutConfig]] = {}

    def __init__(self, layouts_dir: Optional[Path] = None):
        """
        Args:
            layouts_dir: Директория с YAML (по умолчанию settings.LAYOUTS_DIR)
        """
        if layouts_dir is None:
            self.layouts_dir = LAYOUTS_DIR
        else:
            self.layouts_dir = Path(layouts_dir)

    def load(self, layout: Union[Layout, str]) -> LayoutConfig:
        """
        Загружает описание диалекта.

        Args:
            layout: Layout или его строковое значение (nfe_400_local, ...)

        Returns:
            LayoutConfig: Валидированное описание

        Raises:
            LayoutLoadError: Диалект неизвестен, файл не найден или невалиден
        """
        layout = self._resolve_layout(layout)
        cache_key = (str(self.layouts_dir), layout.value)
        if cache_key in self._cache:
            return self._cache[cache_key]

        config_path = self.layouts_dir / LAYOUT_FILES[layout]
        if not config_path.exists():
            raise LayoutLoadError(
                message=f"Файл layout '{layout.value}' не найден: {config_path}",
                component="LayoutLoader"
            )

        logger.debug(f"[LayoutLoader] Загрузка layout {layout.value} из {config_path.name}")

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise LayoutLoadError(
                message=f"Не удалось разобрать YAML layout '{layout.value}': {config_path}",
                component="LayoutLoader",
                original_error=e
            )

        try:
            config = self._parse_and_validate(data, layout)
        except (ValidationError, ValueError) as e:
            logger.error(f"[LayoutLoader] Ошибка валидации layout {layout.value}")
            logger.error(f"[LayoutLoader] Ошибки:\n{e}")
            raise LayoutLoadError(
                message=f"Layout '{layout.value}' невалиден, исправьте {config_path}",
                component="LayoutLoader",
                original_error=e
            )

        self._cache[cache_key] = config
        logger.debug(
            f"[LayoutLoader] Загружен {config.name} (версия {config.version}): "
            f"{len(config.structure)} тегов"
        )
        return config

    def _resolve_layout(self, layout: Union[Layout, str]) -> Layout:
        if isinstance(layout, Layout):
            return layout
        try:
            return Layout(layout)
        except ValueError:
            raise LayoutLoadError(
                message=(
                    f"Неизвестный layout '{layout}'. "
                    f"Доступные: {[item.value for item in Layout]}"
                ),
                component="LayoutLoader"
            )

    def _parse_and_validate(self, data: dict, layout: Layout) -> LayoutConfig:
        """
        Собирает словарь для LayoutConfig из YAML.

        Args:
            data: Словарь из YAML файла
            layout: Диалект (для сообщений и значений по умолчанию)

        Returns:
            Валидированный LayoutConfig
        """
        if not isinstance(data, dict):
            raise ValueError("YAML layout должен быть словарём")

        layout_data = data.get("layout") or {}
        structure = data.get("structure")
        if not structure:
            raise ValueError("Раздел 'structure' обязателен в layout")

        config_dict = {
            "name": layout_data.get("name", layout.value),
            "version": str(layout_data.get("version", "")),
            # Ключи приводим к строкам: YAML может прочитать тег как число или bool
            "structure": {str(tag): str(template) for tag, template in structure.items()},
        }

        dialect_data = data.get("dialect") or {}
        for key in ("delimiter", "batch_marker", "document_start_tag", "item_index_start"):
            if key in dialect_data:
                config_dict[key] = dialect_data[key]
        if "required_tags" in dialect_data:
            config_dict["required_tags"] = {
                str(tag): str(section) for tag, section in dialect_data["required_tags"].items()
            }
        if "tag_order" in dialect_data:
            config_dict["tag_order"] = [str(tag) for tag in dialect_data["tag_order"]]

        return LayoutConfig(**config_dict)

    def list_available(self) -> list:
        """Возвращает список диалектов, для которых есть YAML файл."""
        available = [
            layout.value for layout, filename in LAYOUT_FILES.items()
            if (self.layouts_dir / filename).exists()
        ]
        logger.info(f"[LayoutLoader] Доступные layout: {available}")
        return available

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache.clear()


def load_layout(layout: Union[Layout, str]) -> LayoutConfig:
    """Загружает встроенный диалект загрузчиком по умолчанию."""
    return LayoutLoader().load(layout)
