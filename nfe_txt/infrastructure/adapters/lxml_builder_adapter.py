"""
Адаптер XML builder на lxml, реализующий интерфейс INFeXmlBuilder.

Собирает элемент <NFe> в пространстве имён портала NFe из секций NFeRecord.
Элементы выводятся в порядке полей секций (порядок схемы), пустые поля
пропускаются. Подпись, XSD-валидация и расчёт cDV/chave - вне этого адаптера.
"""

from typing import Dict, List, Optional, Tuple

from lxml import etree
from loguru import logger

from contracts.nfe_record_dto import (
    Destinatario,
    Emitente,
    Identificacao,
    InfAdicionais,
    InfNFe,
    Item,
    NFeSection,
    Referencia,
    Total,
    Transporte,
)
from ...domain.exceptions import DocumentBuildError
from ...domain.interfaces import INFeXmlBuilder


NFE_NAMESPACE = "http://www.portalfiscal.inf.br/nfe"

# Элемент -> поля, которые выводятся атрибутами
ATTRIBUTE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "obsCont": ("xCampo",),
}


def _qname(name: str) -> str:
    return f"{{{NFE_NAMESPACE}}}{name}"


def _fill(element: etree._Element, section: NFeSection) -> etree._Element:
    """Дочерние элементы из секции в порядке полей."""
    attributes = ATTRIBUTE_FIELDS.get(etree.QName(element).localname, ())

    for name, info in type(section).model_fields.items():
        value = getattr(section, name)
        alias = info.alias or name

        if value is None:
            continue
        if isinstance(value, NFeSection):
            _fill(etree.SubElement(element, _qname(alias)), value)
        elif isinstance(value, list):
            for entry in value:
                _fill(etree.SubElement(element, _qname(alias)), entry)
        elif alias in attributes:
            element.set(alias, str(value))
        else:
            etree.SubElement(element, _qname(alias)).text = str(value)

    return element


class LxmlNFeBuilder(INFeXmlBuilder):
    """
    XML builder по умолчанию (lxml).

    Один экземпляр = один документ. get_xml() проверяет наличие
    заголовка, идентификации, эмитента и позиций.
    """

    def __init__(self, pretty_print: bool = False):
        self.pretty_print = pretty_print
        self._header: Optional[InfNFe] = None
        self._ide: Optional[Identificacao] = None
        self._refs: List[Referencia] = []
        self._emit: Optional[Emitente] = None
        self._dest: Optional[Destinatario] = None
        self._det: List[Item] = []
        self._total: Optional[Total] = None
        self._transp: Optional[Transporte] = None
        self._inf_adic: Optional[InfAdicionais] = None

    def tag_inf_nfe(self, header: InfNFe) -> None:
        self._header = header

    def tag_ide(self, identificacao: Identificacao) -> None:
        self._ide = identificacao

    def tag_nf_ref(self, referencia: Referencia) -> None:
        self._refs.append(referencia)

    def tag_emit(self, emitente: Emitente) -> None:
        self._emit = emitente

    def tag_dest(self, destinatario: Destinatario) -> None:
        self._dest = destinatario

    def tag_det(self, item: Item) -> None:
        self._det.append(item)

    def tag_total(self, total: Total) -> None:
        self._total = total

    def tag_transp(self, transporte: Transporte) -> None:
        self._transp = transporte

    def tag_inf_adic(self, inf_adic: InfAdicionais) -> None:
        self._inf_adic = inf_adic

    def _check_complete(self) -> None:
        missing = []
        if self._header is None:
            missing.append("infNFe")
        if self._ide is None:
            missing.append("ide")
        if self._emit is None:
            missing.append("emit")
        if not self._det:
            missing.append("det")
        if missing:
            raise DocumentBuildError(
                message=f"incomplete NFe, missing: {', '.join(missing)}",
                component="LxmlNFeBuilder"
            )

    def get_xml(self) -> bytes:
        """
        Собирает <NFe> и сериализует в UTF-8 с XML декларацией.

        Raises:
            DocumentBuildError: Нет обязательных секций
        """
        self._check_complete()

        root = etree.Element(_qname("NFe"), nsmap={None: NFE_NAMESPACE})
        inf_nfe = etree.SubElement(root, _qname("infNFe"))
        if self._header.id:
            inf_nfe.set("Id", self._header.id)
        if self._header.versao:
            inf_nfe.set("versao", self._header.versao)

        ide = _fill(etree.SubElement(inf_nfe, _qname("ide")), self._ide)
        for referencia in self._refs:
            _fill(etree.SubElement(ide, _qname("NFref")), referencia)

        _fill(etree.SubElement(inf_nfe, _qname("emit")), self._emit)
        if self._dest is not None:
            _fill(etree.SubElement(inf_nfe, _qname("dest")), self._dest)

        for item in self._det:
            det = etree.SubElement(inf_nfe, _qname("det"), nItem=str(item.n_item))
            _fill(etree.SubElement(det, _qname("prod")), item.prod)
            if item.inf_ad_prod:
                etree.SubElement(det, _qname("infAdProd")).text = item.inf_ad_prod

        if self._total is not None:
            _fill(etree.SubElement(inf_nfe, _qname("total")), self._total)
        if self._transp is not None:
            _fill(etree.SubElement(inf_nfe, _qname("transp")), self._transp)
        if self._inf_adic is not None:
            _fill(etree.SubElement(inf_nfe, _qname("infAdic")), self._inf_adic)

        logger.debug(f"[LxmlNFeBuilder] NFe собран: {len(self._det)} позиций")
        return etree.tostring(
            root,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=self.pretty_print,
        )
