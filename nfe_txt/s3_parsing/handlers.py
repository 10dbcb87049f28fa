"""
Обработчики тегов TXT.

Каждый обработчик получает состояние разбора и FieldMap строки
(только непустые значения) и обновляет одну секцию записи.
Секции создаются лениво при первом теге.

Теги layout без обработчика (налоги, платежи, ...) игнорируются парсером.
"""

from typing import Callable, Dict, Optional

from contracts.nfe_record_dto import (
    Destinatario,
    Emitente,
    Endereco,
    Identificacao,
    InfAdicionais,
    InfNFe,
    Item,
    NFeRecord,
    ObsCont,
    Produto,
    RefECF,
    RefNF,
    RefNFP,
    Referencia,
    Total,
    Transportadora,
    Transporte,
    Volume,
)


FieldMap = Dict[str, str]


class _ParseState:
    """Состояние разбора одного документа. Создаётся заново на каждый вызов."""

    def __init__(self, item_index_start: int = 1):
        self.record = NFeRecord()
        self.item_index = item_index_start
        self.pending_inf_ad_prod: Optional[str] = None
        self.last_ref_nfp: Optional[RefNFP] = None

    # === Ленивое создание секций ===

    def emitente(self) -> Emitente:
        if self.record.emitente is None:
            self.record.emitente = Emitente()
        return self.record.emitente

    def destinatario(self) -> Destinatario:
        if self.record.destinatario is None:
            self.record.destinatario = Destinatario()
        return self.record.destinatario

    def total(self) -> Total:
        if self.record.total is None:
            self.record.total = Total()
        return self.record.total

    def transporte(self) -> Transporte:
        if self.record.transporte is None:
            self.record.transporte = Transporte()
        return self.record.transporte

    def inf_adic(self) -> InfAdicionais:
        if self.record.inf_adic is None:
            self.record.inf_adic = InfAdicionais()
        return self.record.inf_adic


# =============================================================================
# ЗАГОЛОВОК И ИДЕНТИФИКАЦИЯ
# =============================================================================

def handle_inf_nfe(state: _ParseState, fields: FieldMap) -> None:
    state.record.inf_nfe = InfNFe().merge(fields)


def handle_ide(state: _ParseState, fields: FieldMap) -> None:
    if state.record.identificacao is None:
        state.record.identificacao = Identificacao()
    state.record.identificacao.merge(fields)


# =============================================================================
# ЭМИТЕНТ / ПОЛУЧАТЕЛЬ
# =============================================================================

def handle_emit(state: _ParseState, fields: FieldMap) -> None:
    state.emitente().merge(fields)


def handle_ender_emit(state: _ParseState, fields: FieldMap) -> None:
    emitente = state.emitente()
    if emitente.ender_emit is None:
        emitente.ender_emit = Endereco()
    emitente.ender_emit.merge(fields)


def handle_dest(state: _ParseState, fields: FieldMap) -> None:
    state.destinatario().merge(fields)


def handle_ender_dest(state: _ParseState, fields: FieldMap) -> None:
    destinatario = state.destinatario()
    if destinatario.ender_dest is None:
        destinatario.ender_dest = Endereco()
    destinatario.ender_dest.merge(fields)


# =============================================================================
# ПОЗИЦИИ
# =============================================================================

def handle_item_header(state: _ParseState, fields: FieldMap) -> None:
    """H: явный номер следующей позиции. Нечисловой nItem не меняет счётчик."""
    n_item = fields.get("nItem", "")
    if n_item.isascii() and n_item.isdigit():
        state.item_index = int(n_item)
    state.pending_inf_ad_prod = fields.get("infAdProd")


def handle_item(state: _ParseState, fields: FieldMap) -> None:
    """I: новая позиция с текущим номером, затем номер += 1."""
    item = Item(
        n_item=state.item_index,
        prod=Produto().merge(fields),
        inf_ad_prod=state.pending_inf_ad_prod,
    )
    state.record.itens.append(item)
    state.item_index += 1
    state.pending_inf_ad_prod = None


# =============================================================================
# ИТОГИ, ТРАНСПОРТ, ДОП. ИНФОРМАЦИЯ
# =============================================================================

def handle_total(state: _ParseState, fields: FieldMap) -> None:
    state.total()


def handle_icms_tot(state: _ParseState, fields: FieldMap) -> None:
    state.total().icms_tot.merge(fields)


def handle_transp(state: _ParseState, fields: FieldMap) -> None:
    state.transporte().merge(fields)


def handle_transporta(state: _ParseState, fields: FieldMap) -> None:
    transporte = state.transporte()
    if transporte.transporta is None:
        transporte.transporta = Transportadora()
    transporte.transporta.merge(fields)


def handle_vol(state: _ParseState, fields: FieldMap) -> None:
    state.transporte().vol.append(Volume().merge(fields))


def handle_inf_adic(state: _ParseState, fields: FieldMap) -> None:
    state.inf_adic().merge(fields)


def handle_obs_cont(state: _ParseState, fields: FieldMap) -> None:
    state.inf_adic().obs_cont.append(ObsCont().merge(fields))


# =============================================================================
# ССЫЛКИ НА ДРУГИЕ ДОКУМЕНТЫ (NFref)
# =============================================================================

def handle_ref_nfe(state: _ParseState, fields: FieldMap) -> None:
    state.record.referencias.append(Referencia(ref_nfe=fields.get("refNFe")))


def handle_ref_nf(state: _ParseState, fields: FieldMap) -> None:
    state.record.referencias.append(Referencia(ref_nf=RefNF().merge(fields)))


def handle_ref_nfp(state: _ParseState, fields: FieldMap) -> None:
    ref_nfp = RefNFP().merge(fields)
    state.last_ref_nfp = ref_nfp
    state.record.referencias.append(Referencia(ref_nfp=ref_nfp))


def handle_ref_nfp_emitter(state: _ParseState, fields: FieldMap) -> None:
    """BA13/BA14: CNPJ/CPF производителя для последней ссылки BA10."""
    if state.last_ref_nfp is None:
        ref_nfp = RefNFP()
        state.last_ref_nfp = ref_nfp
        state.record.referencias.append(Referencia(ref_nfp=ref_nfp))
    state.last_ref_nfp.merge(fields)


def handle_ref_cte(state: _ParseState, fields: FieldMap) -> None:
    state.record.referencias.append(Referencia(ref_cte=fields.get("refCTe")))


def handle_ref_ecf(state: _ParseState, fields: FieldMap) -> None:
    state.record.referencias.append(Referencia(ref_ecf=RefECF().merge(fields)))


HANDLERS: Dict[str, Callable[[_ParseState, FieldMap], None]] = {
    "A": handle_inf_nfe,
    "B": handle_ide,
    "C": handle_emit,
    "C02": handle_emit,
    "C02a": handle_emit,
    "C02A": handle_emit,
    "C05": handle_ender_emit,
    "E": handle_dest,
    "E02": handle_dest,
    "E03": handle_dest,
    "E03a": handle_dest,
    "E03A": handle_dest,
    "E05": handle_ender_dest,
    "H": handle_item_header,
    "I": handle_item,
    "W": handle_total,
    "W02": handle_icms_tot,
    "X": handle_transp,
    "X03": handle_transporta,
    "X04": handle_transporta,
    "X05": handle_transporta,
    "X26": handle_vol,
    "Z": handle_inf_adic,
    "Z04": handle_obs_cont,
    "BA02": handle_ref_nfe,
    "BA03": handle_ref_nf,
    "BA10": handle_ref_nfp,
    "BA13": handle_ref_nfp_emitter,
    "BA14": handle_ref_nfp_emitter,
    "BA19": handle_ref_cte,
    "BA20": handle_ref_ecf,
}
