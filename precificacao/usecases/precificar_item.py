# precificacao/usecases/precificar_item.py
"""
Caso de uso: precificar um item de nota (motor de preços).

Fluxo (a ordem importa):
1) Créditos: CBS = PIS + COFINS; IBS = ICMS.
2) Custo efetivo = custo de aquisição - créditos (pode ser negativo).
3) Custo base = (custo de aquisição + CFU), ajustado por perdas.
4) Divisor de markup = 1 - termos do regime. Divisor <= 0 ou perdas >= 100%
   → item INVIAVEL, todos os valores derivados zerados.
5) Preço de venda = custo base / divisor; preço mínimo = custo base /
   divisor mínimo (ou o próprio custo base, se esse divisor não for positivo).
6) Débitos calculados sobre o preço de venda final.
7) Tributo líquido por linha = débito - crédito, limitado a zero para exibição;
   o total a pagar soma CBS e IBS líquidos com sinal e só então aplica o piso.
8) Markup realizado sobre o custo de aquisição original.
9) Composição do preço: aquisição, perdas, custo fixo, tributos brutos,
   despesas variáveis e lucro alvo; lucro líquido realizado do item.
10) Espelho de todos os valores por unidade interna.

Observações:
- Nada é levantado por estados numéricos; a inviabilidade é informada
  pelo campo `status`.
- O CFU é recebido pronto: ele é calculado uma vez por rodada e
  compartilhado por todos os itens.
"""

from __future__ import annotations

from dataclasses import fields
from typing import Dict, Iterable, List, Optional

from precificacao.config import CBS_RATE, IBS_RATE
from precificacao.domain.formulas import (
    ajustar_perdas,
    divisor_markup,
    percentual_markup,
    por_unidade_interna,
    preco_por_divisor,
)
from precificacao.domain.models import (
    ItemCalculado,
    ItemNota,
    Parametros,
    RegimeTributario,
    StatusPreco,
    ValoresUnidadeInterna,
)
from precificacao.domain.policies import piso_zero, status_preco
from precificacao.domain.regimes import fatores_regime
from precificacao.infra.logger import log_calculo


def _espelho_unidade_interna(valores: Dict[str, float], unidades_internas: float) -> ValoresUnidadeInterna:
    """Divide cada valor monetário pelas unidades internas do item."""
    return ValoresUnidadeInterna(**{
        f.name: por_unidade_interna(valores.get(f.name, 0.0), unidades_internas)
        for f in fields(ValoresUnidadeInterna)
    })


def _item_inviavel(item: ItemNota, regime: RegimeTributario, custo_efetivo: float) -> ItemCalculado:
    log_calculo("item_inviavel", {"codigo": item.codigo, "regime": regime.value}, level="debug")
    valores = {"custo_aquisicao": item.custo_aquisicao, "custo_efetivo": custo_efetivo}
    return ItemCalculado(
        item=item,
        regime=regime,
        status=StatusPreco.INVIAVEL,
        custo_efetivo=custo_efetivo,
        unidade_interna=_espelho_unidade_interna(valores, item.unidades_internas),
    )


def precificar(
    item: ItemNota,
    params: Parametros,
    cfu: float,
    regime: Optional[RegimeTributario] = None,
) -> ItemCalculado:
    """Calcula preço de venda, preço mínimo e tributos de um item.

    Args:
        item: Linha da nota (valores por unidade comercial).
        params: Parâmetros globais da rodada.
        cfu: Custo fixo por unidade já rateado.
        regime: Regime a aplicar; ``None`` usa ``params.regime``.

    Returns:
        Um novo ``ItemCalculado``. Se o preço for inviável, ``status`` é
        ``StatusPreco.INVIAVEL`` e preços, débitos, créditos e composição
        ficam em zero.
    """
    regime = regime or params.regime
    fatores = fatores_regime(regime, params)

    # 1) e 2) créditos e custo efetivo
    cbs_credito = item.credito_pis + item.credito_cofins
    ibs_credito = item.credito_icms
    custo_efetivo = item.custo_aquisicao - (cbs_credito + ibs_credito)

    # 3) custo base com rateio e perdas
    custo_base = ajustar_perdas(item.custo_aquisicao + cfu, params.percentual_perdas)

    # 4) viabilidade
    divisor = divisor_markup(fatores.termo_markup)
    if status_preco(divisor, custo_base) is StatusPreco.INVIAVEL:
        return _item_inviavel(item, regime, custo_efetivo)

    # 5) preços
    preco_venda = custo_base / divisor
    preco_minimo = preco_por_divisor(custo_base, divisor_markup(fatores.termo_preco_minimo))

    # 6) débitos sobre o preço final
    cbs_debito = ibs_debito = 0.0
    if fatores.aplica_debito_cbs_ibs:
        cbs_debito = preco_venda * CBS_RATE
        ibs_debito = preco_venda * IBS_RATE
    irpj = csll = simples = 0.0
    if fatores.aplica_irpj_csll:
        irpj = preco_venda * fatores.aliquota_irpj / 100.0
        csll = preco_venda * fatores.aliquota_csll / 100.0
    if fatores.aplica_simples:
        simples = preco_venda * fatores.aliquota_simples / 100.0

    # 7) líquido por linha (com sinal) e valor a pagar (piso zero)
    cbs_liquido = cbs_debito - cbs_credito
    ibs_liquido = ibs_debito - ibs_credito
    cbs_a_pagar = piso_zero(cbs_liquido)
    ibs_a_pagar = piso_zero(ibs_liquido)
    # créditos excedentes de uma linha abatem o débito da outra antes do piso
    imposto_a_pagar = piso_zero(cbs_liquido + ibs_liquido) + irpj + csll + simples
    credito_iva_cliente = cbs_debito + ibs_debito

    # 9) composição do preço
    valor_impostos = cbs_debito + ibs_debito + irpj + csll + simples
    valor_despesas_variaveis = preco_venda * params.total_despesas_variaveis_percent / 100.0
    valor_lucro = preco_venda * params.margem_lucro / 100.0
    valor_perdas = custo_base - (item.custo_aquisicao + cfu)
    margem_contribuicao = preco_venda - (item.custo_aquisicao + valor_despesas_variaveis)
    lucro_liquido = (
        preco_venda - item.custo_aquisicao - imposto_a_pagar - valor_despesas_variaveis - cfu
    )

    valores = {
        "custo_aquisicao": item.custo_aquisicao,
        "custo_efetivo": custo_efetivo,
        "custo_base": custo_base,
        "preco_venda": preco_venda,
        "preco_minimo": preco_minimo,
        "cbs_credito": cbs_credito,
        "ibs_credito": ibs_credito,
        "cbs_debito": cbs_debito,
        "ibs_debito": ibs_debito,
        "cbs_a_pagar": cbs_a_pagar,
        "ibs_a_pagar": ibs_a_pagar,
        "irpj_a_pagar": irpj,
        "csll_a_pagar": csll,
        "simples_a_pagar": simples,
        "imposto_a_pagar": imposto_a_pagar,
        "credito_iva_cliente": credito_iva_cliente,
        "valor_impostos": valor_impostos,
        "valor_despesas_variaveis": valor_despesas_variaveis,
        "valor_custo_fixo": cfu,
        "valor_perdas": valor_perdas,
        "valor_lucro": valor_lucro,
        "margem_contribuicao": margem_contribuicao,
        "lucro_liquido": lucro_liquido,
    }

    return ItemCalculado(
        item=item,
        regime=regime,
        status=StatusPreco.OK,
        custo_efetivo=custo_efetivo,
        custo_base=custo_base,
        preco_venda=preco_venda,
        preco_minimo=preco_minimo,
        cbs_credito=cbs_credito,
        ibs_credito=ibs_credito,
        cbs_debito=cbs_debito,
        ibs_debito=ibs_debito,
        cbs_liquido=cbs_liquido,
        ibs_liquido=ibs_liquido,
        cbs_a_pagar=cbs_a_pagar,
        ibs_a_pagar=ibs_a_pagar,
        irpj_a_pagar=irpj,
        csll_a_pagar=csll,
        simples_a_pagar=simples,
        imposto_a_pagar=imposto_a_pagar,
        credito_iva_cliente=credito_iva_cliente,
        markup_percent=percentual_markup(preco_venda, item.custo_aquisicao),  # 8)
        valor_impostos=valor_impostos,
        valor_despesas_variaveis=valor_despesas_variaveis,
        valor_custo_fixo=cfu,
        valor_perdas=valor_perdas,
        valor_lucro=valor_lucro,
        margem_contribuicao=margem_contribuicao,
        lucro_liquido=lucro_liquido,
        unidade_interna=_espelho_unidade_interna(valores, item.unidades_internas),  # 10)
    )


def precificar_itens(
    itens: Iterable[ItemNota],
    params: Parametros,
    cfu: float,
    regime: Optional[RegimeTributario] = None,
) -> List[ItemCalculado]:
    """Precifica uma coleção de itens com o mesmo CFU e regime."""
    return [precificar(item, params, cfu, regime) for item in itens]
