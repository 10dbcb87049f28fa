"""Stage 1: Splitter - разбиение TXT на документы."""

from .stage import (
    DocumentGroup,
    SourceLine,
    SplitResult,
    SplitterStage,
    parse_batch_header,
    split_documents,
    split_lines,
    split_numbered_lines,
)

__all__ = [
    "DocumentGroup",
    "SourceLine",
    "SplitResult",
    "SplitterStage",
    "parse_batch_header",
    "split_documents",
    "split_lines",
    "split_numbered_lines",
]
