"""
Фабрика для создания компонентов конвертера TXT -> NFe.

Предоставляет методы для создания и конфигурации компонентов
конвертера через единый интерфейс.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
from loguru import logger

from config.settings import BATCH_MAX_WORKERS
from ..domain.interfaces import IDocumentParser, IDocumentValidator, INFeConverter, INFeXmlBuilder
from ..infrastructure.adapters.lxml_builder_adapter import LxmlNFeBuilder
from ..infrastructure.file_manager import TxtFileManager
from ..layouts.layout_config import Layout, LayoutConfig, get_supported_layouts
from ..layouts.layout_loader import LayoutLoader
from ..pipeline import NFeConverter
from ..s2_validation.stage import ValidationStage
from ..s3_parsing.stage import ParsingStage
from ..s4_build.stage import BuilderFactory


class ConverterComponentFactory:
    """
    Фабрика для создания компонентов конвертера.

    Конвертер отвечает за:
    - Загрузку диалектов TXT (layout)
    - Валидацию документов пакета
    - Парсинг документов в NFeRecord
    - Передачу NFeRecord во внешний XML builder
    """

    @staticmethod
    def create_layout_loader(layouts_dir: Optional[Path] = None) -> LayoutLoader:
        logger.debug("[Converter] Создание загрузчика layout")
        return LayoutLoader(layouts_dir=layouts_dir)

    @staticmethod
    def create_layout(
        layout: Union[Layout, str],
        layouts_dir: Optional[Path] = None,
    ) -> LayoutConfig:
        """
        Загружает встроенный диалект.

        Raises:
            LayoutLoadError: Диалект не найден или невалиден
        """
        return ConverterComponentFactory.create_layout_loader(layouts_dir).load(layout)

    @staticmethod
    def create_validator(layout: LayoutConfig) -> IDocumentValidator:
        logger.debug(f"[Converter] Создание валидатора ({layout.name})")
        return ValidationStage(layout)

    @staticmethod
    def create_parser(layout: LayoutConfig) -> IDocumentParser:
        logger.debug(f"[Converter] Создание парсера ({layout.name})")
        return ParsingStage(layout)

    @staticmethod
    def create_xml_builder(pretty_print: bool = False) -> INFeXmlBuilder:
        """
        Создает XML builder по умолчанию (один экземпляр на документ).

        Returns:
            XML builder, реализующий интерфейс INFeXmlBuilder
        """
        return LxmlNFeBuilder(pretty_print=pretty_print)

    @staticmethod
    def create_file_manager() -> TxtFileManager:
        logger.debug("[Converter] Создание менеджера файлов")
        return TxtFileManager()

    @staticmethod
    def create_converter(
        layout: Union[Layout, str, LayoutConfig, None] = None,
        builder_factory: Optional[BuilderFactory] = None,
        max_workers: int = BATCH_MAX_WORKERS,
        file_manager: Optional[TxtFileManager] = None,
    ) -> INFeConverter:
        """
        Создает конвертер пакета TXT.

        Args:
            layout: Диалект (имя встроенного или LayoutConfig)
            builder_factory: Фабрика XML builder (по умолчанию create_xml_builder)
            max_workers: Потоков для документов пакета
            file_manager: Менеджер файлов (опционально)

        Returns:
            Конвертер, реализующий интерфейс INFeConverter
        """
        logger.debug("[Converter] Создание конвертера")

        if builder_factory is None:
            builder_factory = ConverterComponentFactory.create_xml_builder

        if file_manager is None:
            file_manager = ConverterComponentFactory.create_file_manager()

        return NFeConverter(
            layout=layout,
            builder_factory=builder_factory,
            max_workers=max_workers,
            file_manager=file_manager,
        )

    @staticmethod
    def get_converter_info() -> Dict[str, Any]:
        """
        Возвращает информацию о конвертере.

        Returns:
            Словарь с информацией о доступных компонентах и диалектах
        """
        return {
            "domain": "Conversion",
            "responsibility": "Конвертация пакетов TXT в XML NFe",
            "input": "TXT (NOTAFISCAL|N| + строки тегов)",
            "output": "NFe XML",
            "layouts": get_supported_layouts(),
            "components": {
                "splitter": "SplitterStage",
                "validator": "ValidationStage",
                "parser": "ParsingStage",
                "builder": "LxmlNFeBuilder",
                "file_manager": "TxtFileManager",
                "converter": "NFeConverter",
            },
            "capabilities": [
                "batch_splitting",
                "validation",
                "parsing",
                "xml_build",
                "file_management",
            ],
        }
