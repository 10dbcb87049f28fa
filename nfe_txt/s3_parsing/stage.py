"""
Stage 3: Parsing

ЦКП: Структурированная запись NFeRecord из строк документа.

Input: DocumentGroup (или список строк) + LayoutConfig
Output: NFeRecord (значения - сырые строки)

Алгоритм:
1. Нет завершающего разделителя -> MissingTerminatorError (сразу)
2. Строка -> тег + позиционные значения
3. Тег отсутствует в layout -> UnknownTagError (сразу)
4. Количество полей не совпадает -> FieldCountMismatchError (сразу)
5. FieldMap (только непустые обрезанные значения) -> обработчик тега
6. Проверка обязательных секций

Парсер предполагает, что документ уже прошёл валидацию, поэтому
останавливается на первой ошибке. parse_document - чистая функция:
состояние создаётся на каждый вызов, документы можно разбирать параллельно.
"""

from typing import Dict, List, Sequence, Union
from loguru import logger

from contracts.nfe_record_dto import NFeRecord
from ..domain.exceptions import (
    FieldCountMismatchError,
    MissingRequiredSectionError,
    MissingTerminatorError,
    UnknownTagError,
)
from ..domain.interfaces import IDocumentParser
from ..layouts.layout_config import LayoutConfig
from ..s1_splitter.stage import DocumentGroup, SourceLine
from .handlers import HANDLERS, FieldMap, _ParseState


# Обязательный тег -> проверка наличия секции в записи
SECTION_PRESENCE = {
    "A": lambda record: record.inf_nfe is not None,
    "B": lambda record: record.identificacao is not None,
    "C": lambda record: record.emitente is not None,
    "I": lambda record: bool(record.itens),
}


def build_field_map(field_names: List[str], values: List[str]) -> FieldMap:
    """Имена полей -> непустые обрезанные значения."""
    fields: Dict[str, str] = {}
    for name, value in zip(field_names, values):
        value = value.strip()
        if name and value:
            fields[name] = value
    return fields


def _parse_line(line: SourceLine, layout: LayoutConfig, state: _ParseState) -> None:
    if not line.text.endswith(layout.delimiter):
        raise MissingTerminatorError(
            message=f"line {line.number}: line must end with delimiter character ({layout.delimiter})",
            component="Parser"
        )

    tag, values = layout.split_line(line.text)

    if not layout.has_tag(tag):
        raise UnknownTagError(
            message=f"line {line.number}: unknown tag: {tag}",
            component="Parser"
        )

    field_names = layout.field_names(tag)
    if len(values) != len(field_names):
        raise FieldCountMismatchError(
            message=(
                f"line {line.number}: field count mismatch for tag {tag}: "
                f"expected {len(field_names)}, got {len(values)}"
            ),
            component="Parser"
        )

    handler = HANDLERS.get(tag)
    if handler is None:
        return

    handler(state, build_field_map(field_names, values))


def _check_required_sections(record: NFeRecord, layout: LayoutConfig) -> None:
    for tag, section in layout.required_tags.items():
        is_present = SECTION_PRESENCE.get(tag)
        if is_present is not None and not is_present(record):
            raise MissingRequiredSectionError(
                message=f"missing required tag {tag} ({section})",
                component="Parser"
            )


def parse_document(
    group: Union[DocumentGroup, Sequence[str]],
    layout: LayoutConfig,
) -> NFeRecord:
    """
    Разбирает документ в NFeRecord.

    Args:
        group: Группа строк документа или список строк (нумерация с 1)
        layout: Описание диалекта

    Returns:
        NFeRecord: Новая запись (не разделяется с другими вызовами)

    Raises:
        MissingTerminatorError: Строка без завершающего разделителя
        UnknownTagError: Тег отсутствует в layout
        FieldCountMismatchError: Количество полей не совпадает с layout
        MissingRequiredSectionError: Нет обязательной секции
    """
    if not isinstance(group, DocumentGroup):
        group = DocumentGroup.from_texts(group)

    state = _ParseState(item_index_start=layout.item_index_start)
    for line in group.lines:
        _parse_line(line, layout, state)

    _check_required_sections(state.record, layout)
    return state.record


class ParsingStage(IDocumentParser):
    """
    Stage 3: Parsing.

    ЦКП: NFeRecord для документа, прошедшего валидацию.
    """

    def __init__(self, layout: LayoutConfig):
        self.layout = layout

    def process(self, group: Union[DocumentGroup, Sequence[str]]) -> NFeRecord:
        record = parse_document(group, self.layout)

        index = group.index if isinstance(group, DocumentGroup) else 0
        logger.debug(
            f"[Stage 3: Parsing] NFe {index}: {len(record.itens)} позиций, "
            f"{len(record.referencias)} ссылок"
        )
        return record
