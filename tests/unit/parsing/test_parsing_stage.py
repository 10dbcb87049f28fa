"""
Unit-тесты для Stage 3: Parsing.

ЦКП: NFeRecord из строк документа, парсер останавливается на первой
структурной ошибке.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from nfe_txt.domain.exceptions import (
    DocumentParseError,
    FieldCountMismatchError,
    MissingRequiredSectionError,
    MissingTerminatorError,
    UnknownTagError,
)
from nfe_txt.layouts import Layout, LayoutConfig, load_layout
from nfe_txt.s1_splitter import DocumentGroup, SourceLine
from nfe_txt.s3_parsing import ParsingStage, build_field_map, parse_document


MINIMAL_LAYOUT = LayoutConfig(
    name="Minimal",
    version="4.00",
    structure={
        "A": "A|versao|Id|pk_nItem|",
        "B": "B|cUF|natOp|",
        "C": "C|xNome|",
        "H": "H|nItem|infAdProd|",
        "I": "I|cProd|xProd|",
        "M": "M|vTotTrib|",
    },
)


class TestFieldMap:

    def test_only_non_empty_trimmed_values(self):
        assert build_field_map(["a", "b", "c"], [" 1 ", "", "   "]) == {"a": "1"}

    def test_unnamed_slot_is_skipped(self):
        assert build_field_map(["a", ""], ["1", "2"]) == {"a": "1"}


class TestParseDocument:

    def test_header_example(self):
        record = parse_document(
            ["A|4.00|DOC123||", "B|35|VENDA|", "C|ACME|", "I|P1|PRODUTO|"],
            MINIMAL_LAYOUT,
        )

        assert record.inf_nfe.versao == "4.00"
        assert record.inf_nfe.id == "DOC123"
        assert len(record.itens) == 1

    def test_full_document(self, layout, make_document):
        record = parse_document(make_document(layout, items=2), layout)

        assert record.identificacao.c_uf == "35"
        assert record.identificacao.dh_emi == "2024-01-15T10:00:00-03:00"
        assert record.identificacao.dh_sai_ent is None
        assert record.emitente.x_nome == "EMPRESA TESTE LTDA"
        assert record.emitente.cnpj == "14200166000187"
        assert record.emitente.ender_emit.x_mun == "SAO PAULO"
        assert record.emitente.ender_emit.x_cpl is None
        assert record.destinatario.email == "cliente@example.com"
        assert record.destinatario.ender_dest.uf == "RJ"
        assert [item.n_item for item in record.itens] == [1, 2]
        assert record.itens[1].prod.x_prod == "PRODUTO 2"
        assert record.total.icms_tot.v_nf == "20.00"
        assert record.transporte.mod_frete == "9"
        assert record.inf_adic.inf_cpl == "DOCUMENTO DE TESTE"

    def test_values_stay_raw_strings(self, layout, make_document):
        record = parse_document(make_document(layout), layout)
        assert record.itens[0].prod.q_com == "1.0000"

    def test_optional_sections_absent(self):
        record = parse_document(["A|4.00|X||", "B|35||", "C|ACME|", "I|P1||"], MINIMAL_LAYOUT)

        assert record.destinatario is None
        assert record.total is None
        assert record.transporte is None
        assert record.inf_adic is None
        assert record.referencias == []

    def test_grammar_tag_without_handler_is_ignored(self):
        record = parse_document(
            ["A|4.00|X||", "B|35||", "C|ACME|", "I|P1||", "M|12.50|"],
            MINIMAL_LAYOUT,
        )
        assert len(record.itens) == 1

    def test_each_call_returns_new_record(self, layout, make_document):
        lines = make_document(layout)
        first = parse_document(lines, layout)
        second = parse_document(lines, layout)

        assert first is not second
        assert first.emitente is not second.emitente
        assert [item.n_item for item in second.itens] == [1]


class TestItemNumbering:

    def test_auto_increment_without_item_header(self):
        record = parse_document(
            ["A|4.00|X||", "B|35||", "C|ACME|", "I|P1||", "I|P2||", "I|P3||"],
            MINIMAL_LAYOUT,
        )
        assert [item.n_item for item in record.itens] == [1, 2, 3]

    def test_item_header_sets_next_index(self):
        record = parse_document(
            ["A|4.00|X||", "B|35||", "C|ACME|", "H|10|LOTE 7|", "I|P1||", "I|P2||"],
            MINIMAL_LAYOUT,
        )

        assert [item.n_item for item in record.itens] == [10, 11]
        assert record.itens[0].inf_ad_prod == "LOTE 7"
        assert record.itens[1].inf_ad_prod is None

    def test_non_numeric_item_header_keeps_counter(self):
        record = parse_document(
            ["A|4.00|X||", "B|35||", "C|ACME|", "I|P1||", "H|abc||", "I|P2||"],
            MINIMAL_LAYOUT,
        )
        assert [item.n_item for item in record.itens] == [1, 2]

    def test_start_index_from_layout(self):
        layout = MINIMAL_LAYOUT.model_copy(update={"item_index_start": 0})
        record = parse_document(
            ["A|4.00|X||", "B|35||", "C|ACME|", "I|P1||", "I|P2||"],
            layout,
        )
        assert [item.n_item for item in record.itens] == [0, 1]


class TestPartialMerge:

    def test_issuer_sub_tags_merge(self, layout, make_line):
        lines = [
            make_line(layout, "A", versao="4.00", Id="X"),
            make_line(layout, "B", cUF="35"),
            make_line(layout, "C02", CNPJ="14200166000187"),
            make_line(layout, "C", xNome="ACME", IE="ISENTO"),
            make_line(layout, "C", xFant="ACME FANTASIA"),
            make_line(layout, "I", cProd="P1"),
        ]

        record = parse_document(lines, layout)

        assert record.emitente.cnpj == "14200166000187"
        assert record.emitente.x_nome == "ACME"
        assert record.emitente.x_fant == "ACME FANTASIA"
        assert record.emitente.ie == "ISENTO"

    def test_recipient_foreign_id(self, layout, make_document, make_line):
        lines = make_document(layout)
        lines.insert(7, make_line(layout, "E03a", idEstrangeiro="AB1234"))

        record = parse_document(lines, layout)

        assert record.destinatario.id_estrangeiro == "AB1234"
        assert record.destinatario.cnpj == "11222333000181"

    def test_sebrae_uppercase_tags(self, make_document, make_line):
        layout = load_layout(Layout.NFE_400_SEBRAE)
        lines = make_document(layout)
        lines.insert(4, make_line(layout, "C02A", CPF="12345678909"))

        record = parse_document(lines, layout)

        assert record.emitente.cpf == "12345678909"


class TestTransportAndNotes:

    def test_transport(self, layout, make_document, make_line):
        lines = make_document(layout) + [
            make_line(layout, "X03", xNome="TRANSPORTES SA", UF="SP"),
            make_line(layout, "X04", CNPJ="33444555000166"),
            make_line(layout, "X26", qVol="2", esp="CAIXA"),
            make_line(layout, "X26", qVol="1", esp="PALETE"),
        ]

        transporte = parse_document(lines, layout).transporte

        assert transporte.mod_frete == "9"
        assert transporte.transporta.x_nome == "TRANSPORTES SA"
        assert transporte.transporta.cnpj == "33444555000166"
        assert [vol.esp for vol in transporte.vol] == ["CAIXA", "PALETE"]

    def test_observations(self, layout, make_document, make_line):
        lines = make_document(layout) + [
            make_line(layout, "Z04", xCampo="PEDIDO", xTexto="12345"),
        ]

        inf_adic = parse_document(lines, layout).inf_adic

        assert inf_adic.inf_cpl == "DOCUMENTO DE TESTE"
        assert inf_adic.obs_cont[0].x_campo == "PEDIDO"
        assert inf_adic.obs_cont[0].x_texto == "12345"


class TestReferences:

    def test_reference_kinds(self, layout, make_document, make_line):
        lines = make_document(layout)
        refs = [
            make_line(layout, "BA02", refNFe="3" * 44),
            make_line(layout, "BA03", cUF="35", AAMM="2401", CNPJ="14200166000187", mod="01", serie="1", nNF="10"),
            make_line(layout, "BA10", cUF="35", AAMM="2401", IE="123456789", mod="04", serie="0", nNF="5"),
            make_line(layout, "BA13", CNPJ="11222333000181"),
            make_line(layout, "BA19", refCTe="5" * 44),
            make_line(layout, "BA20", mod="2D", nECF="001", nCOO="000123"),
        ]
        lines[2:2] = refs

        record = parse_document(lines, layout)
        referencias = record.referencias

        assert len(referencias) == 5
        assert referencias[0].ref_nfe == "3" * 44
        assert referencias[1].ref_nf.n_nf == "10"
        assert referencias[2].ref_nfp.ie == "123456789"
        assert referencias[2].ref_nfp.cnpj == "11222333000181"
        assert referencias[3].ref_cte == "5" * 44
        assert referencias[4].ref_ecf.n_coo == "000123"


class TestParseErrors:

    def test_missing_terminator(self, layout, make_document):
        lines = make_document(layout)
        lines[0] = "A|4.00|NFe1|X"

        with pytest.raises(MissingTerminatorError) as exc_info:
            parse_document(lines, layout)

        assert exc_info.value.message == "line 1: line must end with delimiter character (|)"
        assert isinstance(exc_info.value, DocumentParseError)

    def test_unknown_tag(self):
        with pytest.raises(UnknownTagError, match="line 2: unknown tag: QQ"):
            parse_document(["A|4.00|X||", "QQ|1|"], MINIMAL_LAYOUT)

    def test_field_count_mismatch(self):
        with pytest.raises(FieldCountMismatchError) as exc_info:
            parse_document(["A|4.00|X||", "B|35|"], MINIMAL_LAYOUT)

        message = exc_info.value.message
        assert message == "line 2: field count mismatch for tag B: expected 2, got 1"

    def test_missing_issuer(self):
        with pytest.raises(MissingRequiredSectionError, match=r"missing required tag C \(issuer\)"):
            parse_document(["A|4.00|X||", "B|35||", "I|P1||"], MINIMAL_LAYOUT)

    def test_missing_items(self):
        with pytest.raises(MissingRequiredSectionError, match="items"):
            parse_document(["A|4.00|X||", "B|35||", "C|ACME|"], MINIMAL_LAYOUT)

    def test_physical_line_numbers_in_errors(self):
        group = DocumentGroup(index=2, lines=[SourceLine(41, "A|4.00|X||"), SourceLine(42, "XX|")])

        with pytest.raises(DocumentParseError, match="line 42"):
            ParsingStage(MINIMAL_LAYOUT).process(group)


class TestConcurrentParsing:

    def test_documents_parse_independently(self, layout, make_document):
        documents = [make_document(layout, n_nf=n, items=n) for n in range(1, 9)]

        with ThreadPoolExecutor(max_workers=4) as executor:
            records = list(executor.map(lambda lines: parse_document(lines, layout), documents))

        for n, record in enumerate(records, start=1):
            assert record.identificacao.n_nf == str(n)
            assert [item.n_item for item in record.itens] == list(range(1, n + 1))
