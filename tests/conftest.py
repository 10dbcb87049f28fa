"""
Общие фикстуры: layout и построение строк / пакетов TXT.

Строки собираются по шаблонам layout (txt_line), поэтому количество полей
всегда совпадает с диалектом.
"""

import pytest

from nfe_txt.layouts import Layout, LayoutConfig, LayoutLoader


def txt_line(layout: LayoutConfig, tag: str, **fields) -> str:
    """Строка тега: значения по именам полей, отсутствующие = пусто."""
    values = [fields.get(name, "") for name in layout.field_names(tag)]
    return layout.delimiter.join([tag, *values]) + layout.delimiter


def nfe_lines(
    layout: LayoutConfig,
    n_nf: int = 1,
    versao: str = "4.00",
    items: int = 1,
    issuer: bool = True,
) -> list:
    """Корректный документ NFe: заголовок, ide, эмитент, получатель, позиции, итоги."""
    lines = [
        txt_line(layout, "A", versao=versao, Id=f"NFe{n_nf:044d}"),
        txt_line(
            layout, "B",
            cUF="35", cNF=f"{n_nf:08d}", natOp="VENDA", mod="55", serie="1",
            nNF=str(n_nf), dhEmi="2024-01-15T10:00:00-03:00", tpNF="1", idDest="1",
            cMunFG="3550308", tpImp="1", tpEmis="1", cDV="9", tpAmb="2", finNFe="1",
            indFinal="1", indPres="1", procEmi="0", verProc="1.0",
        ),
    ]
    if issuer:
        lines += [
            txt_line(layout, "C", xNome="EMPRESA TESTE LTDA", xFant="TESTE", IE="123456789012", CRT="3"),
            txt_line(layout, "C02", CNPJ="14200166000187"),
            txt_line(
                layout, "C05",
                xLgr="RUA TESTE", nro="100", xBairro="CENTRO", cMun="3550308",
                xMun="SAO PAULO", UF="SP", CEP="01001000", cPais="1058", xPais="BRASIL",
            ),
        ]
    lines += [
        txt_line(layout, "E", xNome="CLIENTE TESTE", indIEDest="9", email="cliente@example.com"),
        txt_line(layout, "E02", CNPJ="11222333000181"),
        txt_line(
            layout, "E05",
            xLgr="AV CLIENTE", nro="200", xBairro="BAIRRO", cMun="3304557",
            xMun="RIO DE JANEIRO", UF="RJ", CEP="20010000", cPais="1058", xPais="BRASIL",
        ),
    ]
    for number in range(1, items + 1):
        lines += [
            txt_line(layout, "H", nItem=str(number)),
            txt_line(
                layout, "I",
                cProd=f"{number:03d}", cEAN="SEM GTIN", xProd=f"PRODUTO {number}",
                NCM="61091000", CFOP="5102", uCom="UN", qCom="1.0000", vUnCom="10.00",
                vProd="10.00", cEANTrib="SEM GTIN", uTrib="UN", qTrib="1.0000",
                vUnTrib="10.00", indTot="1",
            ),
        ]
    total = f"{10 * items:.2f}"
    lines += [
        txt_line(layout, "W"),
        txt_line(layout, "W02", vProd=total, vNF=total),
        txt_line(layout, "X", modFrete="9"),
        txt_line(layout, "Z", infCpl="DOCUMENTO DE TESTE"),
    ]
    return lines


def nfe_batch(layout: LayoutConfig, *documents, declared=None) -> str:
    """Пакет TXT: заголовок NOTAFISCAL + документы."""
    count = len(documents) if declared is None else declared
    header = f"{layout.batch_marker}{layout.delimiter}{count}{layout.delimiter}"
    lines = [header]
    for document in documents:
        lines.extend(document)
    return "\n".join(lines) + "\n"


@pytest.fixture
def layout() -> LayoutConfig:
    return LayoutLoader().load(Layout.NFE_400_LOCAL)


@pytest.fixture
def make_line():
    return txt_line


@pytest.fixture
def make_document():
    return nfe_lines


@pytest.fixture
def make_batch():
    return nfe_batch
