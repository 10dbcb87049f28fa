"""
Правила проверки значений полей TXT.

Две проверки для каждого поля:
1. Запрещённые символы (управляющие и небезопасные для XML) - для любого поля
2. Формат по имени поля (таблица FIELD_RULES) - только для известных имён

Проверяется только формат. Контрольные цифры CNPJ/CPF и корректность налогов
проверяет builder / бизнес-слой.
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List

from config.settings import SUPPORTED_VERSIONS


# < > " ' табуляция, CR, прочие управляющие символы и DEL
PROHIBITED_CHARS = re.compile(r"[<>\"'\t\r\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

NON_DIGITS = re.compile(r"\D", re.ASCII)

DATETIME_PATTERNS = [
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2}$", re.ASCII),  # ISO с часовым поясом
    re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$", re.ASCII),                 # ISO без пояса
    re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$", re.ASCII),                 # простой datetime
    re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII),                                   # только дата
]

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

CFOP_PATTERN = re.compile(r"^\d{4}$", re.ASCII)

VALID_MODELS = {"55", "65"}

# Диапазон кодов UF IBGE
UF_CODE_MIN = 11
UF_CODE_MAX = 53


def _digits(value: str) -> str:
    return NON_DIGITS.sub("", value)


def _is_taxpayer_id(value: str, length: int) -> bool:
    digits = _digits(value)
    if len(digits) != length:
        return False
    # 00000000000000, 11111111111111, ... формально 14 цифр, но недопустимы
    return len(set(digits)) > 1


def has_prohibited_chars(value: str) -> bool:
    return PROHIBITED_CHARS.search(value) is not None


def is_valid_version(value: str) -> bool:
    return value in SUPPORTED_VERSIONS


def is_valid_cnpj(value: str) -> bool:
    return _is_taxpayer_id(value, 14)


def is_valid_cpf(value: str) -> bool:
    return _is_taxpayer_id(value, 11)


def is_valid_uf(value: str) -> bool:
    if len(value) != 2 or not (value.isascii() and value.isdigit()):
        return False
    return UF_CODE_MIN <= int(value) <= UF_CODE_MAX


def is_valid_model(value: str) -> bool:
    return value in VALID_MODELS


def is_valid_datetime(value: str) -> bool:
    return any(pattern.match(value) for pattern in DATETIME_PATTERNS)


def is_valid_ie(value: str) -> bool:
    if value == "ISENTO":
        return True
    return 8 <= len(_digits(value)) <= 14


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.match(value) is not None


def is_valid_cep(value: str) -> bool:
    return len(_digits(value)) == 8


def is_valid_ncm(value: str) -> bool:
    return len(_digits(value)) == 8


def is_valid_cfop(value: str) -> bool:
    return CFOP_PATTERN.match(value) is not None


@dataclass(frozen=True)
class FieldRule:
    """Правило формата для поля с определённым именем."""
    check: Callable[[str], bool]
    message: str                    # шаблон сообщения, {value} = значение
    validate_empty: bool = False    # проверять ли пустое значение


FIELD_RULES: Dict[str, FieldRule] = {
    "versao": FieldRule(is_valid_version, "invalid version: {value}", validate_empty=True),
    "CNPJ": FieldRule(is_valid_cnpj, "invalid CNPJ format: {value}"),
    "CPF": FieldRule(is_valid_cpf, "invalid CPF format: {value}"),
    "cUF": FieldRule(is_valid_uf, "invalid UF code: {value}"),
    "mod": FieldRule(is_valid_model, "invalid model: {value} (must be 55 or 65)"),
    "dhEmi": FieldRule(is_valid_datetime, "invalid datetime format: {value}"),
    "dhSaiEnt": FieldRule(is_valid_datetime, "invalid datetime format: {value}"),
    "IE": FieldRule(is_valid_ie, "invalid IE format: {value}"),
    "email": FieldRule(is_valid_email, "invalid email format: {value}"),
    "CEP": FieldRule(is_valid_cep, "invalid CEP format: {value}"),
    "NCM": FieldRule(is_valid_ncm, "invalid NCM format: {value}"),
    "CFOP": FieldRule(is_valid_cfop, "invalid CFOP format: {value}"),
}


def check_field(field_name: str, value: str) -> List[str]:
    """
    Проверяет значение поля.

    Args:
        field_name: Имя поля из layout
        value: Сырое значение из строки TXT

    Returns:
        Сообщения об ошибках (пустой список = значение корректно)
    """
    messages = []

    if has_prohibited_chars(value):
        messages.append("contains prohibited characters")

    rule = FIELD_RULES.get(field_name)
    if rule is None:
        return messages

    clean_value = value.strip()
    if not clean_value and not rule.validate_empty:
        return messages

    if not rule.check(clean_value):
        messages.append(rule.message.format(value=clean_value))

    return messages
