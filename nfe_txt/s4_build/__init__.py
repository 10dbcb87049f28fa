"""Stage 4: Build - NFeRecord -> XML через внешний builder."""

from .stage import BuildStage, BuilderFactory

__all__ = [
    "BuildStage",
    "BuilderFactory",
]
