"""
Конвертер TXT -> NFe XML.

Архитектура: 4-этапный пайплайн
- Stage 1: Splitter (заголовок NOTAFISCAL, разбиение на документы)
- Stage 2: Validation (все замечания документа за проход)
- Stage 3: Parsing (строки документа -> NFeRecord)
- Stage 4: Build (NFeRecord -> XML через внешний builder)

Вход: TXT пакет (bytes / str) + диалект (Layout или LayoutConfig)
Выход: ConversionResult (XML, ошибки и предупреждения по документам)
"""

from nfe_txt.pipeline import (
    ConversionResult,
    DocumentOutcome,
    NFeConverter,
    convert_txt_to_xml,
)
from nfe_txt.layouts import (
    Layout,
    LayoutConfig,
    LayoutLoader,
    get_supported_layouts,
    load_layout,
)

# Stage exports
from nfe_txt.s1_splitter import DocumentGroup, SourceLine, SplitResult, SplitterStage
from nfe_txt.s2_validation import (
    ValidationFinding,
    ValidationResult,
    ValidationStage,
    validate_document,
)
from nfe_txt.s3_parsing import ParsingStage, parse_document
from nfe_txt.s4_build import BuildStage

__all__ = [
    # Pipeline
    "NFeConverter",
    "ConversionResult",
    "DocumentOutcome",
    "convert_txt_to_xml",

    # Layouts
    "Layout",
    "LayoutConfig",
    "LayoutLoader",
    "get_supported_layouts",
    "load_layout",

    # Stages
    "DocumentGroup",
    "SourceLine",
    "SplitResult",
    "SplitterStage",
    "ValidationFinding",
    "ValidationResult",
    "ValidationStage",
    "validate_document",
    "ParsingStage",
    "parse_document",
    "BuildStage",
]
