"""
Unit-тесты для Stage 4: Build и адаптера LxmlNFeBuilder.

ЦКП: Секции NFeRecord передаются во внешний builder, ошибки builder
становятся DocumentBuildError.
"""

import pytest
from lxml import etree

from contracts.nfe_record_dto import Emitente, InfNFe, Item, NFeRecord, Produto
from nfe_txt.domain.exceptions import DocumentBuildError
from nfe_txt.domain.interfaces import INFeXmlBuilder
from nfe_txt.infrastructure.adapters import NFE_NAMESPACE, LxmlNFeBuilder
from nfe_txt.s3_parsing import parse_document
from nfe_txt.s4_build import BuildStage


NS = {"nfe": NFE_NAMESPACE}


class RecordingBuilder(INFeXmlBuilder):
    """Builder, записывающий порядок вызовов."""

    def __init__(self):
        self.calls = []

    def tag_inf_nfe(self, header):
        self.calls.append("inf_nfe")

    def tag_ide(self, identificacao):
        self.calls.append("ide")

    def tag_nf_ref(self, referencia):
        self.calls.append("nf_ref")

    def tag_emit(self, emitente):
        self.calls.append("emit")

    def tag_dest(self, destinatario):
        self.calls.append("dest")

    def tag_det(self, item):
        self.calls.append(f"det:{item.n_item}")

    def tag_total(self, total):
        self.calls.append("total")

    def tag_transp(self, transporte):
        self.calls.append("transp")

    def tag_inf_adic(self, inf_adic):
        self.calls.append("inf_adic")

    def get_xml(self):
        return b"<NFe/>"


class FailingBuilder(RecordingBuilder):

    def tag_emit(self, emitente):
        raise RuntimeError("emit rejected")


class TestBuildStage:

    def test_sections_fed_in_order(self, layout, make_document, make_line):
        lines = make_document(layout, items=2)
        lines.insert(2, make_line(layout, "BA02", refNFe="1" * 44))
        record = parse_document(lines, layout)
        builders = []

        def factory():
            builder = RecordingBuilder()
            builders.append(builder)
            return builder

        xml = BuildStage(factory).process(record)

        assert xml == b"<NFe/>"
        assert builders[0].calls == [
            "inf_nfe", "ide", "nf_ref", "emit", "dest",
            "det:1", "det:2", "total", "transp", "inf_adic",
        ]

    def test_absent_sections_are_skipped(self):
        builder = RecordingBuilder()
        record = NFeRecord(inf_nfe=InfNFe(versao="4.00"), itens=[Item(n_item=1)])

        BuildStage(lambda: builder).process(record)

        assert builder.calls == ["inf_nfe", "det:1"]

    def test_fresh_builder_per_document(self, layout, make_document):
        record = parse_document(make_document(layout), layout)
        builders = []

        def factory():
            builders.append(RecordingBuilder())
            return builders[-1]

        stage = BuildStage(factory)
        stage.process(record)
        stage.process(record)

        assert len(builders) == 2
        assert builders[0] is not builders[1]

    def test_builder_exception_wrapped(self, layout, make_document):
        record = parse_document(make_document(layout), layout)

        with pytest.raises(DocumentBuildError) as exc_info:
            BuildStage(FailingBuilder).process(record)

        assert isinstance(exc_info.value.original_error, RuntimeError)


class TestLxmlNFeBuilder:

    def test_document_structure(self, layout, make_document, make_line):
        lines = make_document(layout, items=2)
        lines[8] = make_line(layout, "H", nItem="1", infAdProd="LOTE 7")
        lines.append(make_line(layout, "Z04", xCampo="PEDIDO", xTexto="12345"))
        record = parse_document(lines, layout)

        xml = BuildStage(LxmlNFeBuilder).process(record)
        root = etree.fromstring(xml)

        assert xml.startswith(b"<?xml")
        assert root.tag == f"{{{NFE_NAMESPACE}}}NFe"
        inf_nfe = root.find("nfe:infNFe", NS)
        assert inf_nfe.get("versao") == "4.00"
        assert inf_nfe.get("Id") == record.inf_nfe.id
        assert [etree.QName(child).localname for child in inf_nfe] == [
            "ide", "emit", "dest", "det", "det", "total", "transp", "infAdic",
        ]
        assert root.findtext("nfe:infNFe/nfe:emit/nfe:CNPJ", namespaces=NS) == "14200166000187"
        assert root.findtext("nfe:infNFe/nfe:emit/nfe:enderEmit/nfe:UF", namespaces=NS) == "SP"
        dets = root.findall("nfe:infNFe/nfe:det", NS)
        assert [det.get("nItem") for det in dets] == ["1", "2"]
        assert dets[0].findtext("nfe:infAdProd", namespaces=NS) == "LOTE 7"
        assert root.findtext("nfe:infNFe/nfe:total/nfe:ICMSTot/nfe:vNF", namespaces=NS) == "20.00"
        obs = root.find("nfe:infNFe/nfe:infAdic/nfe:obsCont", NS)
        assert obs.get("xCampo") == "PEDIDO"
        assert obs.findtext("nfe:xTexto", namespaces=NS) == "12345"

    def test_empty_fields_are_omitted(self, layout, make_document):
        record = parse_document(make_document(layout), layout)

        root = etree.fromstring(BuildStage(LxmlNFeBuilder).process(record))

        assert root.find("nfe:infNFe/nfe:ide/nfe:dhSaiEnt", NS) is None
        assert root.find("nfe:infNFe/nfe:emit/nfe:enderEmit/nfe:xCpl", NS) is None

    def test_emit_children_in_schema_order(self, layout, make_document):
        record = parse_document(make_document(layout), layout)

        root = etree.fromstring(BuildStage(LxmlNFeBuilder).process(record))
        emit = root.find("nfe:infNFe/nfe:emit", NS)

        assert [etree.QName(child).localname for child in emit] == [
            "CNPJ", "xNome", "xFant", "enderEmit", "IE", "CRT",
        ]

    def test_references_inside_ide(self, layout, make_document, make_line):
        lines = make_document(layout)
        lines.insert(2, make_line(layout, "BA02", refNFe="1" * 44))
        record = parse_document(lines, layout)

        root = etree.fromstring(BuildStage(LxmlNFeBuilder).process(record))

        assert root.findtext("nfe:infNFe/nfe:ide/nfe:NFref/nfe:refNFe", namespaces=NS) == "1" * 44

    def test_incomplete_document(self):
        builder = LxmlNFeBuilder()
        builder.tag_inf_nfe(InfNFe(versao="4.00"))
        builder.tag_emit(Emitente(x_nome="ACME"))
        builder.tag_det(Item(n_item=1, prod=Produto(c_prod="P1")))

        with pytest.raises(DocumentBuildError, match="missing: ide"):
            builder.get_xml()
