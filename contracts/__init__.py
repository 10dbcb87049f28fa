"""
Контракты DTO проекта NFe TXT Converter.

Все контракты используют Pydantic v2.

Контракты:
- Parser -> XML builder: NFeRecord (nfe_record_dto.py)
"""

from .nfe_record_dto import (
    NFeSection,
    NFeRecord,
    InfNFe,
    Identificacao,
    Endereco,
    Emitente,
    Destinatario,
    Produto,
    Item,
    ICMSTotal,
    Total,
    Transportadora,
    Volume,
    Transporte,
    ObsCont,
    InfAdicionais,
    RefNF,
    RefNFP,
    RefECF,
    Referencia,
)

__all__ = [
    "NFeSection",
    "NFeRecord",
    "InfNFe",
    "Identificacao",
    "Endereco",
    "Emitente",
    "Destinatario",
    "Produto",
    "Item",
    "ICMSTotal",
    "Total",
    "Transportadora",
    "Volume",
    "Transporte",
    "ObsCont",
    "InfAdicionais",
    "RefNF",
    "RefNFP",
    "RefECF",
    "Referencia",
]
