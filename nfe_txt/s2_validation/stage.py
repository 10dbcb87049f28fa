"""
Stage 2: Validation

ЦКП: Полный список дефектов документа за один проход.

Input: DocumentGroup (или список строк) + LayoutConfig
Output: ValidationResult (все замечания, valid = замечаний нет)

Проверки строки:
1. Завершающий разделитель (без него строку дальше не проверяем)
2. Тег известен layout (иначе поля не проверяем)
3. Количество полей (при несовпадении поля всё равно проверяются)
4. Значения полей (field_rules)

Проверки документа:
- обязательные теги (замечание с line = 0)
- порядок тегов (tag_order)

В отличие от парсера, валидация не останавливается на первой ошибке.
Без состояния: один экземпляр можно использовать из нескольких потоков.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union
from loguru import logger

from ..domain.interfaces import IDocumentValidator
from ..layouts.layout_config import LayoutConfig
from ..s1_splitter.stage import DocumentGroup, SourceLine
from .field_rules import check_field


@dataclass
class ValidationFinding:
    """
    Замечание валидации.

    line - номер строки в файле (0 = замечание уровня документа),
    document - позиция документа в пакете (0 = документ проверен отдельно).
    """
    line: int
    tag: str
    message: str
    field: Optional[str] = None
    document: int = 0

    def __str__(self) -> str:
        if self.field:
            return f"line {self.line}, tag {self.tag}, field {self.field}: {self.message}"
        return f"line {self.line}, tag {self.tag}: {self.message}"

    def to_dict(self) -> dict:
        return {
            "document": self.document,
            "line": self.line,
            "tag": self.tag,
            "field": self.field,
            "message": self.message,
        }


@dataclass
class ValidationResult:
    """
    Результат Stage 2: Validation.

    ЦКП: Все замечания по документу (или пакету).
    """
    errors: List[ValidationFinding] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def extend(self, other: "ValidationResult") -> None:
        self.errors.extend(other.errors)

    def messages(self) -> List[str]:
        """Сообщения для оператора, с номером документа если он известен."""
        return [
            f"NFe {finding.document}: {finding}" if finding.document else str(finding)
            for finding in self.errors
        ]

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": [finding.to_dict() for finding in self.errors],
        }


def _as_group(group: Union[DocumentGroup, Sequence[str]]) -> DocumentGroup:
    if isinstance(group, DocumentGroup):
        return group
    return DocumentGroup.from_texts(group)


def _validate_line(
    line: SourceLine,
    layout: LayoutConfig,
) -> Tuple[List[ValidationFinding], Optional[str]]:
    """
    Проверяет одну строку.

    Returns:
        (замечания, тег строки если он известен layout)
    """
    findings: List[ValidationFinding] = []

    if not line.text.endswith(layout.delimiter):
        findings.append(ValidationFinding(
            line=line.number,
            tag=layout.extract_tag(line.text),
            message=f"line must end with delimiter character ({layout.delimiter})",
        ))
        return findings, None

    tag, values = layout.split_line(line.text)

    if not layout.has_tag(tag):
        findings.append(ValidationFinding(
            line=line.number,
            tag=tag,
            message=f"unknown tag: {tag}",
        ))
        return findings, None

    field_names = layout.field_names(tag)
    if len(values) != len(field_names):
        findings.append(ValidationFinding(
            line=line.number,
            tag=tag,
            message=f"field count mismatch: expected {len(field_names)}, got {len(values)}",
        ))

    # zip: при несовпадении количества проверяем общую часть
    for field_name, value in zip(field_names, values):
        if not field_name:
            continue
        for message in check_field(field_name, value):
            findings.append(ValidationFinding(
                line=line.number,
                tag=tag,
                field=field_name,
                message=message,
            ))

    return findings, tag


def _validate_tag_sequence(
    lines: Sequence[SourceLine],
    layout: LayoutConfig,
) -> List[ValidationFinding]:
    """Один проход: каждый тег из tag_order не раньше предыдущего."""
    findings: List[ValidationFinding] = []
    positions = {tag: pos for pos, tag in enumerate(layout.tag_order)}
    seen = set()

    for line in lines:
        tag = layout.extract_tag(line.text)
        pos = positions.get(tag)
        if pos is None:
            continue

        if pos > 0:
            predecessor = layout.tag_order[pos - 1]
            if predecessor not in seen:
                findings.append(ValidationFinding(
                    line=line.number,
                    tag=tag,
                    message=f"tag {tag} must come after tag {predecessor}",
                ))
        seen.add(tag)

    return findings


def validate_document(
    group: Union[DocumentGroup, Sequence[str]],
    layout: LayoutConfig,
) -> ValidationResult:
    """
    Проверяет документ целиком и возвращает все замечания.

    Args:
        group: Группа строк документа или список строк (нумерация с 1)
        layout: Описание диалекта

    Returns:
        ValidationResult
    """
    group = _as_group(group)
    result = ValidationResult()
    present_tags = set()

    for line in group.lines:
        findings, tag = _validate_line(line, layout)
        result.errors.extend(findings)
        if tag is not None:
            present_tags.add(tag)

    for tag, section in layout.required_tags.items():
        if tag not in present_tags:
            result.errors.append(ValidationFinding(
                line=0,
                tag=tag,
                message=f"missing required tag {tag} ({section})",
            ))

    result.errors.extend(_validate_tag_sequence(group.lines, layout))

    for finding in result.errors:
        finding.document = group.index

    return result


class ValidationStage(IDocumentValidator):
    """
    Stage 2: Validation.

    ЦКП: Документ без дефектов формата или полный список дефектов.
    """

    def __init__(self, layout: LayoutConfig):
        self.layout = layout

    def process(self, group: Union[DocumentGroup, Sequence[str]]) -> ValidationResult:
        group = _as_group(group)
        result = validate_document(group, self.layout)

        if result.valid:
            logger.debug(f"[Stage 2: Validation] NFe {group.index}: OK ({len(group.lines)} строк)")
        else:
            logger.warning(
                f"[Stage 2: Validation] NFe {group.index}: {len(result.errors)} замечаний"
            )
        return result
