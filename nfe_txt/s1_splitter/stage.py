"""
Stage 1: Splitter

ЦКП: Разбиение содержимого TXT на документы.

Input: bytes/str содержимое файла + LayoutConfig
Output: SplitResult (объявленное количество, группы строк по документам)

Алгоритм:
1. Нормализация переводов строк, trim, удаление пустых строк
2. Разбор заголовка пакета (NOTAFISCAL|N|)
3. Группировка строк: каждая строка с тегом начала документа открывает новую группу
4. Сверка количества групп с заголовком

Функции чистые и без состояния: одна реализация для конвертации и для
validate-only.
"""

from dataclasses import dataclass, field
from typing import List, NamedTuple, Sequence, Union
from loguru import logger

from config.settings import TXT_ENCODINGS
from ..domain.exceptions import (
    BatchHeaderError,
    DocumentCountMismatchError,
    EmptyContentError,
)
from ..layouts.layout_config import LayoutConfig


class SourceLine(NamedTuple):
    """Строка TXT с физическим номером строки в файле (с 1)."""
    number: int
    text: str


@dataclass
class DocumentGroup:
    """
    Строки одного документа NFe.

    index - позиция документа в пакете (с 1).
    """
    index: int
    lines: List[SourceLine] = field(default_factory=list)

    @property
    def texts(self) -> List[str]:
        return [line.text for line in self.lines]

    @property
    def first_line_number(self) -> int:
        return self.lines[0].number if self.lines else 0

    @classmethod
    def from_texts(cls, texts: Sequence[str], index: int = 0) -> "DocumentGroup":
        """Группа из голых строк, нумерация с 1. index 0 = документ вне пакета."""
        return cls(
            index=index,
            lines=[SourceLine(number, text) for number, text in enumerate(texts, start=1)],
        )

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "first_line": self.first_line_number,
            "lines_count": len(self.lines),
        }


@dataclass
class SplitResult:
    """
    Результат Stage 1: Splitter.

    ЦКП: Документы пакета, количество совпадает с заголовком.
    """
    declared_count: int
    documents: List[DocumentGroup] = field(default_factory=list)
    total_lines: int = 0

    def to_dict(self) -> dict:
        return {
            "declared_count": self.declared_count,
            "documents": [doc.to_dict() for doc in self.documents],
            "total_lines": self.total_lines,
        }


def decode_content(content: Union[bytes, str]) -> str:
    """Декодирует bytes по списку TXT_ENCODINGS."""
    if isinstance(content, str):
        return content

    for encoding in TXT_ENCODINGS:
        try:
            text = content.decode(encoding)
        except UnicodeDecodeError:
            logger.debug(f"[Splitter] Содержимое не в кодировке {encoding}")
            continue
        if encoding != TXT_ENCODINGS[0]:
            logger.warning(f"[Splitter] TXT декодирован как {encoding}")
        return text

    raise EmptyContentError(
        message=f"TXT content is not decodable with {TXT_ENCODINGS}",
        component="Splitter"
    )


def split_numbered_lines(content: Union[bytes, str]) -> List[SourceLine]:
    """
    Делит содержимое на непустые строки с физическими номерами.

    \\r\\n и \\r нормализуются в \\n, строки обрезаются, пустые пропускаются.
    BOM в начале файла отбрасывается.
    """
    text = decode_content(content)
    if text.startswith("\ufeff"):
        text = text[1:]
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    lines = []
    for number, raw in enumerate(text.split("\n"), start=1):
        stripped = raw.strip()
        if stripped:
            lines.append(SourceLine(number, stripped))
    return lines


def split_lines(content: Union[bytes, str]) -> List[str]:
    """Непустые обрезанные строки в исходном порядке."""
    return [line.text for line in split_numbered_lines(content)]


def parse_batch_header(first_line: str, layout: LayoutConfig) -> int:
    """
    Разбирает заголовок пакета "NOTAFISCAL|N|".

    Returns:
        Объявленное количество документов (> 0)

    Raises:
        BatchHeaderError: Нет маркера, количество не положительное целое
            или нет завершающего разделителя
    """
    marker = f"{layout.batch_marker}{layout.delimiter}"
    if not first_line.startswith(marker):
        raise BatchHeaderError(
            message=f"invalid TXT format: missing {layout.batch_marker} header",
            component="Splitter"
        )

    parts = first_line.split(layout.delimiter)
    raw_count = parts[1].strip() if len(parts) > 1 else ""
    if not (raw_count.isascii() and raw_count.isdigit()) or int(raw_count) <= 0:
        raise BatchHeaderError(
            message=f"invalid NFe count in header: '{raw_count}'",
            component="Splitter"
        )

    if not first_line.endswith(layout.delimiter):
        raise BatchHeaderError(
            message=f"batch header must end with delimiter character ({layout.delimiter})",
            component="Splitter"
        )

    return int(raw_count)


def split_documents(
    lines: Sequence[Union[SourceLine, str]],
    layout: LayoutConfig,
) -> List[DocumentGroup]:
    """
    Группирует строки по документам.

    Строка с тегом начала документа закрывает текущую непустую группу и
    открывает новую. Последняя группа выдаётся всегда. Строки до первого
    тега начала образуют отдельную группу: в пакете она меняет количество
    документов, а при совпадении с заголовком не проходит валидацию.
    """
    groups: List[DocumentGroup] = []
    current: List[SourceLine] = []

    for position, line in enumerate(lines, start=1):
        if not isinstance(line, SourceLine):
            line = SourceLine(position, line)

        if layout.is_document_start(line.text) and current:
            groups.append(DocumentGroup(index=len(groups) + 1, lines=current))
            current = [line]
        else:
            current.append(line)

    if current:
        groups.append(DocumentGroup(index=len(groups) + 1, lines=current))

    return groups


class SplitterStage:
    """
    Stage 1: Splitter.

    ЦКП: Документы пакета с проверенным заголовком и количеством.
    """

    def __init__(self, layout: LayoutConfig):
        self.layout = layout

    def process(self, content: Union[bytes, str]) -> SplitResult:
        """
        Делит содержимое TXT на документы.

        Raises:
            EmptyContentError: Нет ни одной непустой строки
            BatchHeaderError: Некорректный заголовок пакета
            DocumentCountMismatchError: Количество документов не совпадает
        """
        lines = split_numbered_lines(content)
        if not lines:
            raise EmptyContentError(message="empty TXT content", component="Splitter")

        declared_count = parse_batch_header(lines[0].text, self.layout)
        documents = split_documents(lines[1:], self.layout)

        if len(documents) != declared_count:
            logger.error(
                f"[Stage 1: Splitter] Заголовок объявляет {declared_count} документов, "
                f"найдено {len(documents)}"
            )
            raise DocumentCountMismatchError(
                expected=declared_count,
                found=len(documents),
                component="Splitter"
            )

        logger.debug(
            f"[Stage 1: Splitter] {len(lines)} строк, {len(documents)} документов"
        )
        return SplitResult(
            declared_count=declared_count,
            documents=documents,
            total_lines=len(lines),
        )
