"""
Менеджер файлов для конвертера TXT -> NFe.

Чтение TXT пакетов и запись XML / JSON отчётов.
"""

import json
from pathlib import Path
from typing import Any, Dict, List
from loguru import logger

from ..domain.exceptions import ConversionFileError


class TxtFileManager:
    """Менеджер файлов конвертера."""

    def read_txt(self, file_path: Path) -> bytes:
        """
        Читает TXT файл как bytes (декодирование - в Splitter).

        Raises:
            ConversionFileError: Файл не существует или не читается
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise ConversionFileError(
                message=f"Файл не найден: {file_path}",
                component="TxtFileManager"
            )

        try:
            content = file_path.read_bytes()
        except (IOError, OSError) as e:
            raise ConversionFileError(
                message=f"Не удалось прочитать TXT файл: {file_path}",
                component="TxtFileManager",
                original_error=e
            )

        logger.debug(f"[TxtFileManager] Прочитан {file_path.name}: {len(content)} байт")
        return content

    def save_xml(self, xml: bytes, file_path: Path) -> Path:
        """
        Сохраняет XML документа.

        Raises:
            ConversionFileError: Не удалось записать файл
        """
        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(xml)
        except (IOError, OSError) as e:
            raise ConversionFileError(
                message=f"Не удалось сохранить XML файл: {file_path}",
                component="TxtFileManager",
                original_error=e
            )

        logger.debug(f"[TxtFileManager] Файл сохранен: {file_path}")
        return file_path

    def save_xmls(self, xmls: List[bytes], output_dir: Path, stem: str) -> List[Path]:
        """Сохраняет XML пакета как <stem>_<n>.xml (n с 1)."""
        output_dir = Path(output_dir)
        return [
            self.save_xml(xml, output_dir / f"{stem}_{number}.xml")
            for number, xml in enumerate(xmls, start=1)
        ]

    def save_json(self, data: Dict[str, Any], file_path: Path) -> Path:
        """
        Сохраняет отчёт (результат конвертации или валидации) в JSON.

        Raises:
            ConversionFileError: Не удалось сохранить файл
        """
        file_path = Path(file_path)
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
        except (IOError, OSError, TypeError) as e:
            raise ConversionFileError(
                message=f"Не удалось сохранить JSON файл: {file_path}",
                component="TxtFileManager",
                original_error=e
            )

        logger.debug(f"[TxtFileManager] Файл сохранен: {file_path}")
        return file_path

    def get_txt_files(self, directory_path: Path) -> List[Path]:
        """TXT файлы директории (отсортированы). Нет директории - пустой список."""
        directory_path = Path(directory_path)
        if not directory_path.exists():
            return []
        return sorted(directory_path.glob("*.txt"))
