"""Stage 3: Parsing - строки документа -> NFeRecord."""

from .handlers import HANDLERS
from .stage import ParsingStage, build_field_map, parse_document

__all__ = [
    "HANDLERS",
    "ParsingStage",
    "build_field_map",
    "parse_document",
]
