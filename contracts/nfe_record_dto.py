"""
DTO контракт: парсер TXT -> XML builder.

Структурированная запись одного документа NFe. Значения полей остаются
сырыми строками из TXT: числа, даты и вычисляемые поля (cDV, chave)
форматирует builder.

Атрибуты в snake_case, alias = имя поля в layout и элемент XML.
Порядок полей совпадает с порядком элементов схемы NFe.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class NFeSection(BaseModel):
    """Базовая секция записи: доступ по snake_case и по имени поля layout."""

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def aliases(cls) -> Dict[str, str]:
        """Отображение alias (имя поля layout) -> имя атрибута, только строковые поля."""
        return {
            (info.alias or name): name
            for name, info in cls.model_fields.items()
            if info.annotation == Optional[str]
        }

    def merge(self, fields: Dict[str, str]) -> "NFeSection":
        """
        Переносит присутствующие поля в секцию (перезапись, не дополнение).

        Args:
            fields: FieldMap строки TXT

        Returns:
            Эта же секция
        """
        for alias, attr in self.aliases().items():
            value = fields.get(alias)
            if value:
                setattr(self, attr, value)
        return self


class InfNFe(NFeSection):
    """Заголовок документа (тег A)."""
    versao: Optional[str] = Field(None, alias="versao", description="Версия схемы")
    id: Optional[str] = Field(None, alias="Id", description="Идентификатор NFe + chave")


class Identificacao(NFeSection):
    """Идентификация документа (тег B)."""
    c_uf: Optional[str] = Field(None, alias="cUF")
    c_nf: Optional[str] = Field(None, alias="cNF")
    nat_op: Optional[str] = Field(None, alias="natOp")
    ind_pag: Optional[str] = Field(None, alias="indPag")
    mod: Optional[str] = Field(None, alias="mod")
    serie: Optional[str] = Field(None, alias="serie")
    n_nf: Optional[str] = Field(None, alias="nNF")
    dh_emi: Optional[str] = Field(None, alias="dhEmi")
    dh_sai_ent: Optional[str] = Field(None, alias="dhSaiEnt")
    tp_nf: Optional[str] = Field(None, alias="tpNF")
    id_dest: Optional[str] = Field(None, alias="idDest")
    c_mun_fg: Optional[str] = Field(None, alias="cMunFG")
    tp_imp: Optional[str] = Field(None, alias="tpImp")
    tp_emis: Optional[str] = Field(None, alias="tpEmis")
    c_dv: Optional[str] = Field(None, alias="cDV")
    tp_amb: Optional[str] = Field(None, alias="tpAmb")
    fin_nfe: Optional[str] = Field(None, alias="finNFe")
    ind_final: Optional[str] = Field(None, alias="indFinal")
    ind_pres: Optional[str] = Field(None, alias="indPres")
    ind_intermed: Optional[str] = Field(None, alias="indIntermed")
    proc_emi: Optional[str] = Field(None, alias="procEmi")
    ver_proc: Optional[str] = Field(None, alias="verProc")
    dh_cont: Optional[str] = Field(None, alias="dhCont")
    x_just: Optional[str] = Field(None, alias="xJust")


class Endereco(NFeSection):
    """Адрес эмитента / получателя (теги C05, E05)."""
    x_lgr: Optional[str] = Field(None, alias="xLgr")
    nro: Optional[str] = Field(None, alias="nro")
    x_cpl: Optional[str] = Field(None, alias="xCpl")
    x_bairro: Optional[str] = Field(None, alias="xBairro")
    c_mun: Optional[str] = Field(None, alias="cMun")
    x_mun: Optional[str] = Field(None, alias="xMun")
    uf: Optional[str] = Field(None, alias="UF")
    cep: Optional[str] = Field(None, alias="CEP")
    c_pais: Optional[str] = Field(None, alias="cPais")
    x_pais: Optional[str] = Field(None, alias="xPais")
    fone: Optional[str] = Field(None, alias="fone")


class Emitente(NFeSection):
    """Эмитент (теги C, C02, C02a, C05)."""
    cnpj: Optional[str] = Field(None, alias="CNPJ")
    cpf: Optional[str] = Field(None, alias="CPF")
    x_nome: Optional[str] = Field(None, alias="xNome")
    x_fant: Optional[str] = Field(None, alias="xFant")
    ender_emit: Optional[Endereco] = Field(None, alias="enderEmit")
    ie: Optional[str] = Field(None, alias="IE")
    iest: Optional[str] = Field(None, alias="IEST")
    im: Optional[str] = Field(None, alias="IM")
    cnae: Optional[str] = Field(None, alias="CNAE")
    crt: Optional[str] = Field(None, alias="CRT")


class Destinatario(NFeSection):
    """Получатель (теги E, E02, E03, E03a, E05)."""
    cnpj: Optional[str] = Field(None, alias="CNPJ")
    cpf: Optional[str] = Field(None, alias="CPF")
    id_estrangeiro: Optional[str] = Field(None, alias="idEstrangeiro")
    x_nome: Optional[str] = Field(None, alias="xNome")
    ender_dest: Optional[Endereco] = Field(None, alias="enderDest")
    ind_ie_dest: Optional[str] = Field(None, alias="indIEDest")
    ie: Optional[str] = Field(None, alias="IE")
    isuf: Optional[str] = Field(None, alias="ISUF")
    im: Optional[str] = Field(None, alias="IM")
    email: Optional[str] = Field(None, alias="email")


class Produto(NFeSection):
    """Товар позиции (тег I)."""
    c_prod: Optional[str] = Field(None, alias="cProd")
    c_ean: Optional[str] = Field(None, alias="cEAN")
    x_prod: Optional[str] = Field(None, alias="xProd")
    ncm: Optional[str] = Field(None, alias="NCM")
    c_benef: Optional[str] = Field(None, alias="cBenef")
    extipi: Optional[str] = Field(None, alias="EXTIPI")
    cfop: Optional[str] = Field(None, alias="CFOP")
    u_com: Optional[str] = Field(None, alias="uCom")
    q_com: Optional[str] = Field(None, alias="qCom")
    v_un_com: Optional[str] = Field(None, alias="vUnCom")
    v_prod: Optional[str] = Field(None, alias="vProd")
    c_ean_trib: Optional[str] = Field(None, alias="cEANTrib")
    u_trib: Optional[str] = Field(None, alias="uTrib")
    q_trib: Optional[str] = Field(None, alias="qTrib")
    v_un_trib: Optional[str] = Field(None, alias="vUnTrib")
    v_frete: Optional[str] = Field(None, alias="vFrete")
    v_seg: Optional[str] = Field(None, alias="vSeg")
    v_desc: Optional[str] = Field(None, alias="vDesc")
    v_outro: Optional[str] = Field(None, alias="vOutro")
    ind_tot: Optional[str] = Field(None, alias="indTot")
    x_ped: Optional[str] = Field(None, alias="xPed")
    n_item_ped: Optional[str] = Field(None, alias="nItemPed")
    n_fci: Optional[str] = Field(None, alias="nFCI")


class Item(NFeSection):
    """Позиция документа (det). n_item проставляет парсер."""
    n_item: int = Field(..., alias="nItem", description="Номер позиции")
    prod: Produto = Field(default_factory=Produto, alias="prod")
    inf_ad_prod: Optional[str] = Field(None, alias="infAdProd")


class ICMSTotal(NFeSection):
    """Итоги ICMS (тег W02)."""
    v_bc: Optional[str] = Field(None, alias="vBC")
    v_icms: Optional[str] = Field(None, alias="vICMS")
    v_icms_deson: Optional[str] = Field(None, alias="vICMSDeson")
    v_fcp: Optional[str] = Field(None, alias="vFCP")
    v_bc_st: Optional[str] = Field(None, alias="vBCST")
    v_st: Optional[str] = Field(None, alias="vST")
    v_fcp_st: Optional[str] = Field(None, alias="vFCPST")
    v_fcp_st_ret: Optional[str] = Field(None, alias="vFCPSTRet")
    v_prod: Optional[str] = Field(None, alias="vProd")
    v_frete: Optional[str] = Field(None, alias="vFrete")
    v_seg: Optional[str] = Field(None, alias="vSeg")
    v_desc: Optional[str] = Field(None, alias="vDesc")
    v_ii: Optional[str] = Field(None, alias="vII")
    v_ipi: Optional[str] = Field(None, alias="vIPI")
    v_ipi_devol: Optional[str] = Field(None, alias="vIPIDevol")
    v_pis: Optional[str] = Field(None, alias="vPIS")
    v_cofins: Optional[str] = Field(None, alias="vCOFINS")
    v_outro: Optional[str] = Field(None, alias="vOutro")
    v_nf: Optional[str] = Field(None, alias="vNF")
    v_tot_trib: Optional[str] = Field(None, alias="vTotTrib")


class Total(NFeSection):
    """Итоги документа (теги W, W02)."""
    icms_tot: ICMSTotal = Field(default_factory=ICMSTotal, alias="ICMSTot")


class Transportadora(NFeSection):
    """Перевозчик (теги X03, X04, X05)."""
    cnpj: Optional[str] = Field(None, alias="CNPJ")
    cpf: Optional[str] = Field(None, alias="CPF")
    x_nome: Optional[str] = Field(None, alias="xNome")
    ie: Optional[str] = Field(None, alias="IE")
    x_ender: Optional[str] = Field(None, alias="xEnder")
    x_mun: Optional[str] = Field(None, alias="xMun")
    uf: Optional[str] = Field(None, alias="UF")


class Volume(NFeSection):
    """Объём груза (тег X26)."""
    q_vol: Optional[str] = Field(None, alias="qVol")
    esp: Optional[str] = Field(None, alias="esp")
    marca: Optional[str] = Field(None, alias="marca")
    n_vol: Optional[str] = Field(None, alias="nVol")
    peso_l: Optional[str] = Field(None, alias="pesoL")
    peso_b: Optional[str] = Field(None, alias="pesoB")


class Transporte(NFeSection):
    """Транспорт (теги X, X03, X04, X05, X26)."""
    mod_frete: Optional[str] = Field(None, alias="modFrete")
    transporta: Optional[Transportadora] = Field(None, alias="transporta")
    vol: List[Volume] = Field(default_factory=list, alias="vol")


class ObsCont(NFeSection):
    """Свободное поле наблюдения (тег Z04)."""
    x_campo: Optional[str] = Field(None, alias="xCampo")
    x_texto: Optional[str] = Field(None, alias="xTexto")


class InfAdicionais(NFeSection):
    """Дополнительная информация (теги Z, Z04)."""
    inf_ad_fisco: Optional[str] = Field(None, alias="infAdFisco")
    inf_cpl: Optional[str] = Field(None, alias="infCpl")
    obs_cont: List[ObsCont] = Field(default_factory=list, alias="obsCont")


class RefNF(NFeSection):
    """Ссылка на NF модели 1/1A (тег BA03)."""
    c_uf: Optional[str] = Field(None, alias="cUF")
    aamm: Optional[str] = Field(None, alias="AAMM")
    cnpj: Optional[str] = Field(None, alias="CNPJ")
    mod: Optional[str] = Field(None, alias="mod")
    serie: Optional[str] = Field(None, alias="serie")
    n_nf: Optional[str] = Field(None, alias="nNF")


class RefNFP(NFeSection):
    """Ссылка на NF производителя (теги BA10, BA13, BA14)."""
    c_uf: Optional[str] = Field(None, alias="cUF")
    aamm: Optional[str] = Field(None, alias="AAMM")
    cnpj: Optional[str] = Field(None, alias="CNPJ")
    cpf: Optional[str] = Field(None, alias="CPF")
    ie: Optional[str] = Field(None, alias="IE")
    mod: Optional[str] = Field(None, alias="mod")
    serie: Optional[str] = Field(None, alias="serie")
    n_nf: Optional[str] = Field(None, alias="nNF")


class RefECF(NFeSection):
    """Ссылка на чек ECF (тег BA20)."""
    mod: Optional[str] = Field(None, alias="mod")
    n_ecf: Optional[str] = Field(None, alias="nECF")
    n_coo: Optional[str] = Field(None, alias="nCOO")


class Referencia(NFeSection):
    """Ссылка на другой фискальный документ (NFref). Заполнен ровно один вид."""
    ref_nfe: Optional[str] = Field(None, alias="refNFe")
    ref_nf: Optional[RefNF] = Field(None, alias="refNF")
    ref_nfp: Optional[RefNFP] = Field(None, alias="refNFP")
    ref_cte: Optional[str] = Field(None, alias="refCTe")
    ref_ecf: Optional[RefECF] = Field(None, alias="refECF")


class NFeRecord(BaseModel):
    """
    Структурированная запись одного документа NFe.

    Подзаписи создаются лениво (при первом теге секции) и принадлежат
    только этой записи.
    """

    inf_nfe: Optional[InfNFe] = Field(None, description="Заголовок (тег A)")
    identificacao: Optional[Identificacao] = Field(None, description="Идентификация (тег B)")
    emitente: Optional[Emitente] = Field(None, description="Эмитент (теги C*)")
    destinatario: Optional[Destinatario] = Field(None, description="Получатель (теги E*)")
    itens: List[Item] = Field(default_factory=list, description="Позиции (теги H/I)")
    total: Optional[Total] = Field(None, description="Итоги (теги W*)")
    transporte: Optional[Transporte] = Field(None, description="Транспорт (теги X*)")
    inf_adic: Optional[InfAdicionais] = Field(None, description="Доп. информация (теги Z*)")
    referencias: List[Referencia] = Field(default_factory=list, description="Ссылки (теги BA*)")
