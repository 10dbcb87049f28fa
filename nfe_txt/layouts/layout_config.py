"""
DTO для описания диалекта TXT (layout).

Layout = неизменяемое описание формата:
- structure: тег -> шаблон "TAG|campo1|campo2|...|"
- параметры диалекта: разделитель, маркер пакета, тег начала документа,
  обязательные теги и их порядок, стартовый номер позиции

Парсер и валидатор не содержат веток под конкретный диалект:
всё поведение задаётся этими данными.

Использует Pydantic для валидации структуры.
"""

from enum import Enum
from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Layout(str, Enum):
    """Встроенные диалекты TXT."""
    NFE_400_LOCAL = "nfe_400_local"
    NFE_400_SEBRAE = "nfe_400_sebrae"
    NFE_310_LOCAL = "nfe_310_local"


# Файлы описаний встроенных диалектов (в директории layouts/)
LAYOUT_FILES: Dict[Layout, str] = {
    Layout.NFE_400_LOCAL: "txtstructure400.yaml",
    Layout.NFE_400_SEBRAE: "txtstructure400_sebrae.yaml",
    Layout.NFE_310_LOCAL: "txtstructure310.yaml",
}

LAYOUT_DESCRIPTIONS: Dict[Layout, str] = {
    Layout.NFE_400_LOCAL: "NFe 4.00 Standard",
    Layout.NFE_400_SEBRAE: "NFe 4.00 SEBRAE",
    Layout.NFE_310_LOCAL: "NFe 3.10 Legacy",
}


def get_supported_layouts() -> List[str]:
    """Возвращает описания встроенных диалектов."""
    return [f"{layout.value} - {LAYOUT_DESCRIPTIONS[layout]}" for layout in Layout]


class LayoutConfig(BaseModel):
    """
    Полное описание диалекта TXT.

    Загружается из YAML (LayoutLoader) или создаётся вызывающим кодом напрямую.
    После создания не изменяется и безопасен для чтения из нескольких потоков.
    """
    name: str = Field(..., description="Название диалекта (NFe 4.00 Local)")
    version: str = Field(..., description="Версия схемы NFe (4.00, 3.10)")
    structure: Dict[str, str] = Field(..., description="Тег -> шаблон полей")

    delimiter: str = Field(default="|", description="Разделитель полей и терминатор строки")
    batch_marker: str = Field(default="NOTAFISCAL", description="Маркер заголовка пакета")
    document_start_tag: str = Field(default="A", description="Тег начала документа")
    required_tags: Dict[str, str] = Field(
        default_factory=lambda: {
            "A": "header",
            "B": "identification",
            "C": "issuer",
            "I": "items",
        },
        description="Обязательные теги -> название секции",
    )
    tag_order: List[str] = Field(
        default_factory=lambda: ["A", "B", "C", "I"],
        description="Теги, каждый из которых не может встретиться раньше предыдущего",
    )
    item_index_start: int = Field(default=1, description="Номер первой позиции без тега H")

    model_config = ConfigDict(frozen=True)

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v):
        if len(v) != 1:
            raise ValueError(f"delimiter должен быть одним символом, получено: {v!r}")
        return v

    @field_validator("item_index_start")
    @classmethod
    def validate_item_index_start(cls, v):
        if v < 0:
            raise ValueError(f"item_index_start не может быть отрицательным, получено: {v}")
        return v

    @model_validator(mode="after")
    def validate_structure(self):
        """Каждый шаблон начинается с тега и заканчивается разделителем."""
        if not self.structure:
            raise ValueError("structure не может быть пустым")

        for tag, template in self.structure.items():
            if not template.startswith(f"{tag}{self.delimiter}"):
                raise ValueError(f"шаблон тега {tag} должен начинаться с '{tag}{self.delimiter}': {template}")
            if not template.endswith(self.delimiter):
                raise ValueError(f"шаблон тега {tag} должен заканчиваться '{self.delimiter}': {template}")

        if self.document_start_tag not in self.structure:
            raise ValueError(f"тег начала документа {self.document_start_tag} отсутствует в structure")

        missing = [tag for tag in self.required_tags if tag not in self.structure]
        if missing:
            raise ValueError(f"обязательные теги отсутствуют в structure: {missing}")

        unknown_order = [tag for tag in self.tag_order if tag not in self.structure]
        if unknown_order:
            raise ValueError(f"tag_order содержит теги вне structure: {unknown_order}")

        return self

    # === Доступ к грамматике ===

    def has_tag(self, tag: str) -> bool:
        return tag in self.structure

    def tag_names(self) -> List[str]:
        return list(self.structure)

    def field_names(self, tag: str) -> List[str]:
        """
        Имена полей тега без служебных слотов (сам тег и пустой слот после
        завершающего разделителя).

        Raises:
            KeyError: Если тега нет в layout
        """
        slots = self.structure[tag].split(self.delimiter)
        return slots[1:-1]

    def field_count(self, tag: str) -> int:
        return len(self.field_names(tag))

    # === Разбор строк TXT ===

    def split_line(self, line: str) -> Tuple[str, List[str]]:
        """
        Делит строку на тег и позиционные значения.

        Один завершающий разделитель отбрасывается:
        "A|4.00|NFe1||" -> ("A", ["4.00", "NFe1", ""])
        """
        body = line[:-1] if line.endswith(self.delimiter) else line
        parts = body.split(self.delimiter)
        return parts[0], parts[1:]

    def extract_tag(self, line: str) -> str:
        """Тег строки или "" если разделитель отсутствует или стоит первым."""
        idx = line.find(self.delimiter)
        if idx > 0:
            return line[:idx]
        return ""

    def is_document_start(self, line: str) -> bool:
        return line.startswith(f"{self.document_start_tag}{self.delimiter}")

    def to_dict(self) -> Dict:
        """Преобразует в словарь для сериализации."""
        return self.model_dump()
