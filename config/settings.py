"""
Настройки проекта NFe TXT Converter.

Значения по умолчанию можно переопределить через переменные окружения.
"""

import os
from pathlib import Path

# =============================================================================
# ПУТИ ПРОЕКТА
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
INPUT_DIR = DATA_DIR / "input"
OUTPUT_DIR = DATA_DIR / "output"

# YAML-описания диалектов TXT (лежат внутри пакета)
LAYOUTS_DIR = PROJECT_ROOT / "nfe_txt" / "layouts"

# =============================================================================
# НАСТРОЙКИ LAYOUT
# =============================================================================
# Диалект по умолчанию (значение Layout: nfe_400_local, nfe_400_sebrae, nfe_310_local)
DEFAULT_LAYOUT = os.getenv("NFE_TXT_LAYOUT", "nfe_400_local")

# Версии схемы NFe, допустимые в поле versao
SUPPORTED_VERSIONS = ["3.10", "4.00"]

# =============================================================================
# НАСТРОЙКИ ЧТЕНИЯ TXT
# =============================================================================
# Кодировки в порядке попытки (ERP часто выгружают в Latin-1)
TXT_ENCODINGS = ["utf-8", "latin-1"]

# =============================================================================
# НАСТРОЙКИ BATCH
# =============================================================================
# Количество потоков для конвертации документов пакета (1 = последовательно)
BATCH_MAX_WORKERS = int(os.getenv("NFE_TXT_MAX_WORKERS", "1"))


# =============================================================================
# ПРОВЕРКА КОНФИГУРАЦИИ
# =============================================================================
def validate_config():
    """Проверяет корректность конфигурации."""
    errors = []

    if not LAYOUTS_DIR.exists():
        errors.append(f"Директория layouts не найдена: {LAYOUTS_DIR}")

    if BATCH_MAX_WORKERS < 1:
        errors.append(
            f"NFE_TXT_MAX_WORKERS должен быть >= 1, получено: {BATCH_MAX_WORKERS}"
        )

    if not TXT_ENCODINGS:
        errors.append("TXT_ENCODINGS не может быть пустым")

    if errors:
        raise ValueError("\n".join(errors))

    # Создаём директории если не существуют
    INPUT_DIR.mkdir(parents=True, exist_ok=True)
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    return True
