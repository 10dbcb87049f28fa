"""
NFe Converter - Оркестратор конвертации пакета TXT -> XML.

Этапы:
1. Splitter (весь файл) → 2. Validation → 3. Parsing → 4. Build (на каждый документ)

Ошибки уровня файла (пустой файл, заголовок, количество документов)
выбрасываются сразу. Ошибка документа записывается в ConversionResult.errors,
остальные документы продолжают обрабатываться. Если не сконвертирован
ни один документ - AllConversionsFailedError (результат внутри исключения).

Документы независимы: при max_workers > 1 обрабатываются в пуле потоков,
порядок результатов совпадает с порядком документов в файле.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
from loguru import logger

from config.settings import BATCH_MAX_WORKERS, DEFAULT_LAYOUT
from contracts.nfe_record_dto import NFeRecord
from .domain.exceptions import (
    AllConversionsFailedError,
    ConversionError,
    DocumentBuildError,
    DocumentParseError,
    DocumentValidationError,
)
from .domain.interfaces import INFeConverter
from .infrastructure.adapters.lxml_builder_adapter import LxmlNFeBuilder
from .infrastructure.file_manager import TxtFileManager
from .layouts.layout_config import Layout, LayoutConfig
from .layouts.layout_loader import LayoutLoader
from .s1_splitter import DocumentGroup, SplitterStage
from .s2_validation import ValidationResult, ValidationStage
from .s3_parsing import ParsingStage
from .s4_build import BuildStage, BuilderFactory


# Префикс ошибки документа по типу исключения
ERROR_PREFIXES = (
    (DocumentValidationError, "validation failed: "),
    (DocumentParseError, "parsing failed: "),
    (DocumentBuildError, "XML generation failed: "),
)


@dataclass
class ConversionResult:
    """
    Результат конвертации пакета.

    ЦКП: XML сконвертированных документов (в порядке файла) + ошибки и
    предупреждения по остальным.
    """
    xmls: List[bytes] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    documents_total: int = 0
    processing_time_ms: float = 0.0

    @property
    def count(self) -> int:
        """Количество успешно сконвертированных документов."""
        return len(self.xmls)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "documents_total": self.documents_total,
            "xmls": [xml.decode("utf-8") for xml in self.xmls],
            "warnings": self.warnings,
            "errors": self.errors,
            "processing_time_ms": self.processing_time_ms,
        }


@dataclass
class DocumentOutcome:
    """Результат конвертации одного документа пакета."""
    index: int
    xml: Optional[bytes] = None
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


def _describe_error(error: ConversionError) -> str:
    for error_type, prefix in ERROR_PREFIXES:
        if isinstance(error, error_type):
            return f"{prefix}{error.message}"
    return error.message


class NFeConverter(INFeConverter):
    """
    Конвертер пакета TXT -> NFe XML.

    Layout задаётся именем встроенного диалекта (Layout / str) или готовым
    LayoutConfig. Builder создаётся builder_factory на каждый документ
    (по умолчанию LxmlNFeBuilder).
    """

    def __init__(
        self,
        layout: Union[Layout, str, LayoutConfig, None] = None,
        builder_factory: Optional[BuilderFactory] = None,
        max_workers: int = BATCH_MAX_WORKERS,
        layout_loader: Optional[LayoutLoader] = None,
        file_manager: Optional[TxtFileManager] = None,
    ):
        """
        Args:
            layout: Диалект TXT (по умолчанию settings.DEFAULT_LAYOUT)
            builder_factory: Фабрика XML builder
            max_workers: Потоков для документов пакета (1 = последовательно)
            layout_loader: Загрузчик layout (опционально)
            file_manager: Менеджер файлов для convert_file (опционально)

        Raises:
            LayoutLoadError: Диалект не найден или невалиден
            ValueError: max_workers < 1
        """
        if max_workers < 1:
            raise ValueError(f"max_workers должен быть >= 1, получено: {max_workers}")

        if layout is None:
            layout = DEFAULT_LAYOUT
        if isinstance(layout, LayoutConfig):
            self.layout = layout
        else:
            self.layout = (layout_loader or LayoutLoader()).load(layout)

        self.max_workers = max_workers
        self.file_manager = file_manager or TxtFileManager()

        self.splitter_stage = SplitterStage(self.layout)
        self.validation_stage = ValidationStage(self.layout)
        self.parsing_stage = ParsingStage(self.layout)
        self.build_stage = BuildStage(builder_factory or LxmlNFeBuilder)

        logger.info(
            f"[NFeConverter] Инициализирован: layout={self.layout.name} "
            f"(версия {self.layout.version}), max_workers={self.max_workers}"
        )

    # === Конвертация ===

    def convert(self, content: Union[bytes, str]) -> ConversionResult:
        """
        Конвертирует пакет TXT.

        Args:
            content: Содержимое файла (bytes или str)

        Returns:
            ConversionResult: Хотя бы один документ сконвертирован

        Raises:
            BatchFormatError: Ошибка уровня файла
            AllConversionsFailedError: Ни один документ не сконвертирован
        """
        start_time = time.time()

        split = self.splitter_stage.process(content)
        logger.info(f"[NFeConverter] Старт конвертации: {len(split.documents)} документов")

        outcomes = self._convert_documents(split.documents)

        result = ConversionResult(documents_total=len(split.documents))
        for outcome in outcomes:
            result.warnings.extend(outcome.warnings)
            if outcome.error is not None:
                result.errors.append(outcome.error)
            else:
                result.xmls.append(outcome.xml)

        result.processing_time_ms = (time.time() - start_time) * 1000
        logger.info(
            f"[NFeConverter] Завершено за {result.processing_time_ms:.1f}ms: "
            f"{result.count}/{result.documents_total} документов, "
            f"{len(result.errors)} ошибок, {len(result.warnings)} предупреждений"
        )

        if result.count == 0:
            raise AllConversionsFailedError(result, component="NFeConverter")

        return result

    def _convert_documents(self, documents: List[DocumentGroup]) -> List[DocumentOutcome]:
        if self.max_workers == 1 or len(documents) < 2:
            return [self.convert_document(group) for group in documents]

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            # map сохраняет порядок документов
            return list(executor.map(self.convert_document, documents))

    def convert_document(self, group: DocumentGroup) -> DocumentOutcome:
        """
        Конвертирует один документ: валидация → парсинг → сборка XML.

        Не выбрасывает исключений: ошибка документа возвращается в outcome.error.
        """
        outcome = DocumentOutcome(index=group.index)

        try:
            validation = self.validation_stage.process(group)
            if not validation.valid:
                raise DocumentValidationError(validation, component="NFeConverter")

            record = self.parsing_stage.process(group)
            outcome.warnings.extend(self._check_version(group.index, record))
            outcome.xml = self.build_stage.process(record)

        except ConversionError as e:
            outcome.error = f"NFe {group.index} conversion error: {_describe_error(e)}"
        except Exception as e:
            wrapped = ConversionError(
                message=f"unexpected error: {e}",
                component="NFeConverter",
                original_error=e
            )
            logger.exception(f"[NFeConverter] NFe {group.index}: {wrapped}")
            outcome.error = f"NFe {group.index} conversion error: {wrapped.message}"

        if outcome.error is not None:
            outcome.warnings.clear()
            logger.error(f"[NFeConverter] {outcome.error}")
        else:
            logger.debug(f"[NFeConverter] NFe {group.index}: сконвертирован")

        return outcome

    def _check_version(self, index: int, record: NFeRecord) -> List[str]:
        versao = record.inf_nfe.versao if record.inf_nfe else None
        if versao and versao != self.layout.version:
            message = (
                f"NFe {index}: version {versao} differs from layout "
                f"{self.layout.name} ({self.layout.version})"
            )
            logger.warning(f"[NFeConverter] {message}")
            return [message]
        return []

    # === Только валидация ===

    def validate_only(self, content: Union[bytes, str]) -> ValidationResult:
        """
        Разбиение и валидация всех документов без парсинга и сборки XML.

        Returns:
            ValidationResult: Замечания всех документов (finding.document = номер NFe)

        Raises:
            BatchFormatError: Ошибка уровня файла
        """
        split = self.splitter_stage.process(content)

        result = ValidationResult()
        for group in split.documents:
            result.extend(self.validation_stage.process(group))

        logger.info(
            f"[NFeConverter] Валидация: {len(split.documents)} документов, "
            f"{len(result.errors)} замечаний"
        )
        return result

    # === Файлы ===

    def convert_file(
        self,
        file_path: Union[Path, str],
        output_dir: Optional[Union[Path, str]] = None,
    ) -> ConversionResult:
        """
        Конвертирует TXT файл.

        Args:
            file_path: Путь к TXT пакету
            output_dir: Если указан - XML сохраняются как <имя>_<n>.xml

        Raises:
            ConversionFileError: Файл не читается / XML не записывается
            BatchFormatError, AllConversionsFailedError: как в convert()
        """
        file_path = Path(file_path)
        logger.info(f"[NFeConverter] Файл: {file_path.name}")

        result = self.convert(self.file_manager.read_txt(file_path))

        if output_dir is not None:
            saved = self.file_manager.save_xmls(result.xmls, Path(output_dir), file_path.stem)
            logger.info(f"[NFeConverter] Сохранено {len(saved)} XML в {output_dir}")

        return result


def convert_txt_to_xml(
    content: Union[bytes, str],
    layout: Union[Layout, str, LayoutConfig, None] = None,
) -> List[bytes]:
    """
    Конвертирует пакет TXT и возвращает только XML.

    Raises:
        BatchFormatError, AllConversionsFailedError: как в NFeConverter.convert()
    """
    return NFeConverter(layout=layout).convert(content).xmls
