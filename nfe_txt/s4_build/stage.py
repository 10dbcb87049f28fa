"""
Stage 4: Build

ЦКП: XML документа из NFeRecord через внешний builder.

Input: NFeRecord
Output: bytes (XML от builder)

Builder создаётся фабрикой на каждый документ: экземпляры builder
не разделяются между документами и потоками. Секции передаются по одной:
заголовок, идентификация, ссылки, эмитент, получатель, позиции, итоги,
транспорт, доп. информация. Отсутствующие необязательные секции пропускаются.
"""

from typing import Callable
from loguru import logger

from contracts.nfe_record_dto import NFeRecord
from ..domain.exceptions import ConversionError, DocumentBuildError
from ..domain.interfaces import INFeXmlBuilder


BuilderFactory = Callable[[], INFeXmlBuilder]


class BuildStage:
    """
    Stage 4: Build.

    ЦКП: XML одного документа или DocumentBuildError.
    """

    def __init__(self, builder_factory: BuilderFactory):
        """
        Args:
            builder_factory: Вызываемый объект, возвращающий новый INFeXmlBuilder
        """
        self.builder_factory = builder_factory

    def feed(self, builder: INFeXmlBuilder, record: NFeRecord) -> None:
        """Передаёт секции записи в builder."""
        if record.inf_nfe is not None:
            builder.tag_inf_nfe(record.inf_nfe)
        if record.identificacao is not None:
            builder.tag_ide(record.identificacao)
        for referencia in record.referencias:
            builder.tag_nf_ref(referencia)
        if record.emitente is not None:
            builder.tag_emit(record.emitente)
        if record.destinatario is not None:
            builder.tag_dest(record.destinatario)
        for item in record.itens:
            builder.tag_det(item)
        if record.total is not None:
            builder.tag_total(record.total)
        if record.transporte is not None:
            builder.tag_transp(record.transporte)
        if record.inf_adic is not None:
            builder.tag_inf_adic(record.inf_adic)

    def process(self, record: NFeRecord) -> bytes:
        """
        Собирает XML документа.

        Raises:
            DocumentBuildError: Ошибка в builder (исходная ошибка в original_error)
        """
        try:
            builder = self.builder_factory()
            self.feed(builder, record)
            xml = builder.get_xml()
        except DocumentBuildError:
            raise
        except ConversionError as e:
            raise DocumentBuildError(
                message=e.message,
                component="BuildStage",
                original_error=e
            )
        except Exception as e:
            raise DocumentBuildError(
                message="XML builder failed",
                component="BuildStage",
                original_error=e
            )

        logger.debug(f"[Stage 4: Build] XML собран: {len(xml)} байт")
        return xml
