# precificacao/usecases/relatorios.py
"""
Relatórios de precificação:
- custo da opção híbrida do Simples Nacional (crédito de IVA ao cliente)
- resultado geral: melhor venda (margem alvo) x venda mínima (margem zero)
- resumo executivo: totais da nota e valores por unidade interna (CUMP)
- tabela de itens calculados (DataFrame) para exportação
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from precificacao.domain.formulas import ajustar_perdas, soma_ponderada
from precificacao.domain.models import (
    ItemCalculado,
    ItemNota,
    Parametros,
    RegimeTributario,
)
from precificacao.infra.logger import log_system_event
from precificacao.usecases.comparar_regimes import CenarioRegime, calcular_cenario


# ----------------------
# util
# ----------------------

def _por(valor: float, base: float) -> float:
    return valor / base if base > 0 else 0.0


def _contribuicao_fixa(cenario: CenarioRegime) -> float:
    """Parcela dos custos fixos absorvida pelos itens da nota (CFU × unidades)."""
    return cenario.cfu * sum(i.quantidade for i in cenario.itens)


# ----------------------
# 1) Custo da opção híbrida
# ----------------------

def custo_opcao_hibrida(itens: Sequence[ItemNota], parametros: Parametros) -> Dict[str, Any]:
    """
    Compara Simples Nacional padrão e híbrido para os mesmos itens.

    O custo da opção é o tributo a mais pago no híbrido para gerar crédito
    de IVA ao comprador: ``tributo híbrido - tributo padrão``. Se algum dos
    cenários for inviável, o custo é 0 e `viavel` sai False.
    """
    padrao = calcular_cenario(itens, parametros, regime=RegimeTributario.SIMPLES_NACIONAL)
    hibrido = calcular_cenario(itens, parametros, regime=RegimeTributario.SIMPLES_NACIONAL_HIBRIDO)
    viavel = padrao.resumo.viavel and hibrido.resumo.viavel

    por_item: List[Dict[str, Any]] = []
    for p, h in zip(padrao.itens, hibrido.itens):
        por_item.append({
            "codigo": p.codigo,
            "nome": p.item.nome,
            "imposto_padrao": p.imposto_a_pagar,
            "imposto_hibrido": h.imposto_a_pagar,
            "lucro_padrao": p.lucro_liquido,
            "lucro_hibrido": h.lucro_liquido,
            "credito_cliente": h.credito_iva_cliente,
            "custo_opcao": (h.imposto_a_pagar - p.imposto_a_pagar) if viavel else 0.0,
        })

    custo = hibrido.resumo.total_imposto - padrao.resumo.total_imposto if viavel else 0.0
    log_system_event("custo_opcao_hibrida", {"viavel": viavel, "custo_opcao": round(custo, 2)})
    return {
        "viavel": viavel,
        "padrao": padrao.resumo,
        "hibrido": hibrido.resumo,
        "custo_opcao": custo,
        "credito_cliente": hibrido.resumo.total_credito_iva_cliente,
        "itens": por_item,
    }


# ----------------------
# 2) Resultado geral (melhor venda x venda mínima)
# ----------------------

def _linha_resultado(cenario: CenarioRegime) -> Dict[str, float]:
    r = cenario.resumo
    return {
        "custo_total": r.total_custo_aquisicao,
        "valor_venda": r.total_venda,
        "lucro_bruto": r.total_venda - r.total_custo_aquisicao,
        "pagamentos_variaveis": r.total_despesas_variaveis,
        "contribuicao_despesas_fixas": _contribuicao_fixa(cenario) if r.viavel else 0.0,
        "cfu": cenario.cfu,
        "impostos": r.total_imposto,
        "margem_contribuicao": r.total_margem_contribuicao,
        "lucro_liquido": r.total_lucro,
    }


def resultado_geral(
    itens: Sequence[ItemNota],
    parametros: Parametros,
    regime: Optional[RegimeTributario] = None,
) -> Dict[str, Any]:
    """
    Resultado da nota em dois cenários do mesmo regime: a melhor venda
    (margem alvo) e a venda mínima (margem de lucro 0).
    """
    melhor = calcular_cenario(itens, parametros, regime=regime)
    minima = calcular_cenario(itens, parametros, regime=regime, margem_lucro=0.0)
    return {
        "regime": melhor.regime,
        "viavel": melhor.resumo.viavel and minima.resumo.viavel,
        "melhor_venda": _linha_resultado(melhor),
        "venda_minima": _linha_resultado(minima),
    }


# ----------------------
# 3) Resumo executivo
# ----------------------

def resumo_executivo(cenario: CenarioRegime) -> Dict[str, Any]:
    """
    Totais da nota e valores por unidade interna.

    CUMP (custo unitário médio ponderado, por unidade interna):
        - bruto: aquisição / unidades internas
        - com perdas: aquisição ajustada por perdas / unidades internas
        - total: com perdas + contribuição fixa / unidades internas
    """
    itens = cenario.itens
    r = cenario.resumo
    unidades_internas = sum(i.quantidade * i.item.unidades_internas for i in itens)
    aquisicao = soma_ponderada((i.custo_aquisicao for i in itens), (i.quantidade for i in itens))
    aquisicao_ajustada = ajustar_perdas(aquisicao, cenario.parametros.percentual_perdas)
    if not r.viavel:
        aquisicao_ajustada = 0.0
    contribuicao_fixa = _contribuicao_fixa(cenario) if r.viavel else 0.0

    cump_bruto = _por(aquisicao, unidades_internas)
    cump_com_perdas = _por(aquisicao_ajustada, unidades_internas)
    return {
        "regime": cenario.regime,
        "viavel": r.viavel,
        "custo_total": aquisicao_ajustada + contribuicao_fixa,
        "venda_total": r.total_venda,
        "lucro_total": r.total_lucro,
        "unidades_internas": unidades_internas,
        "custo_unitario": cump_com_perdas + _por(contribuicao_fixa, unidades_internas),
        "venda_unitaria": _por(r.total_venda, unidades_internas),
        "lucro_unitario": _por(r.total_lucro, unidades_internas),
        "cump": {
            "bruto": cump_bruto,
            "com_perdas": cump_com_perdas,
            "total": cump_com_perdas + _por(contribuicao_fixa, unidades_internas),
            "cfu": cenario.cfu,
        },
    }


# ----------------------
# 4) Tabela de itens
# ----------------------

COLUNAS_ITENS = [
    "codigo", "nome", "unidade", "quantidade", "unidades_internas",
    "custo_aquisicao", "custo_fixo", "custo_base", "markup_percent",
    "preco_venda", "preco_minimo", "preco_venda_unidade_interna",
    "cbs_credito", "ibs_credito", "cbs_debito", "ibs_debito",
    "irpj_a_pagar", "csll_a_pagar", "simples_a_pagar", "imposto_a_pagar",
    "credito_iva_cliente", "margem_contribuicao", "lucro_liquido",
    "lucro_liquido_unidade_interna", "cfop", "cst", "status",
]


def _linha_item(p: ItemCalculado) -> Dict[str, Any]:
    return {
        "codigo": p.codigo,
        "nome": p.item.nome,
        "unidade": p.item.unidade,
        "quantidade": p.quantidade,
        "unidades_internas": p.item.unidades_internas,
        "custo_aquisicao": p.custo_aquisicao,
        "custo_fixo": p.valor_custo_fixo,
        "custo_base": p.custo_base,
        "markup_percent": p.markup_percent,
        "preco_venda": p.preco_venda,
        "preco_minimo": p.preco_minimo,
        "preco_venda_unidade_interna": p.unidade_interna.preco_venda,
        "cbs_credito": p.cbs_credito,
        "ibs_credito": p.ibs_credito,
        "cbs_debito": p.cbs_debito,
        "ibs_debito": p.ibs_debito,
        "irpj_a_pagar": p.irpj_a_pagar,
        "csll_a_pagar": p.csll_a_pagar,
        "simples_a_pagar": p.simples_a_pagar,
        "imposto_a_pagar": p.imposto_a_pagar,
        "credito_iva_cliente": p.credito_iva_cliente,
        "margem_contribuicao": p.margem_contribuicao,
        "lucro_liquido": p.lucro_liquido,
        "lucro_liquido_unidade_interna": p.unidade_interna.lucro_liquido,
        "cfop": p.item.cfop,
        "cst": p.item.cst,
        "status": p.status.value,
    }


def itens_para_dataframe(itens: Sequence[ItemCalculado]) -> pd.DataFrame:
    """Converte itens calculados em DataFrame (uma linha por item)."""
    return pd.DataFrame([_linha_item(p) for p in itens], columns=COLUNAS_ITENS)


def itens_para_registros(itens: Sequence[ItemCalculado]) -> List[Dict[str, Any]]:
    return [_linha_item(p) for p in itens]
