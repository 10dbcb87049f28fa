"""
Интерфейсы (абстрактные классы) для домена конвертации TXT -> NFe.

Домен отвечает за:
1. Разбиение пакета TXT на документы
2. Валидацию документов (все замечания за проход)
3. Парсинг документов в NFeRecord
4. Передачу NFeRecord во внешний XML builder
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from contracts.nfe_record_dto import (
    Destinatario,
    Emitente,
    Identificacao,
    InfAdicionais,
    InfNFe,
    Item,
    NFeRecord,
    Referencia,
    Total,
    Transporte,
)

if TYPE_CHECKING:
    from ..s1_splitter.stage import DocumentGroup
    from ..s2_validation.stage import ValidationResult


class INFeXmlBuilder(ABC):
    """
    Интерфейс внешнего XML builder.

    Один экземпляр собирает один документ: конвертер вызывает tag_* по одному
    разу на секцию (tag_det - на каждую позицию), затем get_xml().
    """

    @abstractmethod
    def tag_inf_nfe(self, header: InfNFe) -> None:
        pass

    @abstractmethod
    def tag_ide(self, identificacao: Identificacao) -> None:
        pass

    @abstractmethod
    def tag_nf_ref(self, referencia: Referencia) -> None:
        """Ссылка на другой документ (NFref), вызывается для каждой ссылки."""
        pass

    @abstractmethod
    def tag_emit(self, emitente: Emitente) -> None:
        pass

    @abstractmethod
    def tag_dest(self, destinatario: Destinatario) -> None:
        pass

    @abstractmethod
    def tag_det(self, item: Item) -> None:
        pass

    @abstractmethod
    def tag_total(self, total: Total) -> None:
        pass

    @abstractmethod
    def tag_transp(self, transporte: Transporte) -> None:
        pass

    @abstractmethod
    def tag_inf_adic(self, inf_adic: InfAdicionais) -> None:
        pass

    @abstractmethod
    def get_xml(self) -> bytes:
        """
        Возвращает собранный документ.

        Raises:
            DocumentBuildError: Документ неполный или не собирается
        """
        pass


class IDocumentValidator(ABC):
    """Интерфейс валидатора документа (накапливает все замечания)."""

    @abstractmethod
    def process(self, group: "DocumentGroup") -> "ValidationResult":
        pass


class IDocumentParser(ABC):
    """Интерфейс парсера документа (останавливается на первой ошибке)."""

    @abstractmethod
    def process(self, group: "DocumentGroup") -> NFeRecord:
        pass


class INFeConverter(ABC):
    """Интерфейс конвертера пакета TXT."""

    @abstractmethod
    def convert(self, content):
        """
        Конвертирует пакет TXT.

        Args:
            content: bytes или str содержимое файла

        Returns:
            ConversionResult
        """
        pass

    @abstractmethod
    def validate_only(self, content) -> "ValidationResult":
        """Только разбиение и валидация, без парсинга и сборки XML."""
        pass
