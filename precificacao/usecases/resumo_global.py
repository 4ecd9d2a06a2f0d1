# precificacao/usecases/resumo_global.py
"""
Caso de uso: resumo global de um cenário (regime + margem de lucro).

Agrega os itens calculados em totais da carteira:
- totais de venda, tributos, despesas variáveis, margem de contribuição
  e de cada linha de crédito/débito (valor unitário × quantidade);
- lucro total = venda - despesas fixas - aquisição ajustada por perdas
  - tributos - despesas variáveis;
- ponto de equilíbrio em faturamento.

Se o cenário for inviável (divisor de markup global <= 0 ou perdas >= 100%),
todos os totais são zerados e o resumo sai com `StatusPreco.INVIAVEL`,
distinto de um cenário viável com lucro zero.
"""

from __future__ import annotations

from typing import Optional, Sequence

from precificacao.domain.formulas import (
    ajustar_perdas,
    divisor_markup,
    percentual_de,
    soma_ponderada,
)
from precificacao.domain.models import (
    ItemCalculado,
    Parametros,
    RegimeTributario,
    ResumoGlobal,
    StatusPreco,
)
from precificacao.domain.policies import status_preco
from precificacao.domain.regimes import fatores_regime
from precificacao.infra.logger import log_calculo


def _total(itens: Sequence[ItemCalculado], campo: str) -> float:
    return soma_ponderada((getattr(p, campo) for p in itens), (p.quantidade for p in itens))


def ponto_equilibrio(
    total_despesas_fixas: float,
    razao_custo_variavel: float,
    razao_tributos: float,
) -> float:
    """Faturamento em que a margem de contribuição cobre as despesas fixas.

    ``CF / (1 - (razão de custo variável + razão de tributos))`` se o
    denominador for positivo; caso contrário 0 (não há ponto de equilíbrio).
    """
    margem = 1.0 - (razao_custo_variavel + razao_tributos)
    if margem <= 0.0:
        return 0.0
    return float(total_despesas_fixas) / margem


def resumir(
    itens: Sequence[ItemCalculado],
    params: Parametros,
    total_despesas_fixas: float,
    regime: Optional[RegimeTributario] = None,
) -> ResumoGlobal:
    """Agrega itens calculados em um `ResumoGlobal`.

    Args:
        itens: Itens já precificados sob o mesmo regime e parâmetros.
        params: Parâmetros globais do cenário.
        total_despesas_fixas: Custos fixos totais (CFT) do cenário.
        regime: Regime do cenário; ``None`` usa ``params.regime``.

    Returns:
        ``ResumoGlobal``. Lista vazia gera um resumo zerado e viável.
    """
    regime = regime or params.regime
    itens = list(itens)
    fatores = fatores_regime(regime, params)

    custo_aquisicao = soma_ponderada(
        (p.custo_aquisicao for p in itens), (p.quantidade for p in itens)
    )
    custo_aquisicao_ajustado = ajustar_perdas(custo_aquisicao, params.percentual_perdas)

    status = status_preco(divisor_markup(fatores.termo_markup), custo_aquisicao_ajustado)
    if status is StatusPreco.INVIAVEL:
        log_calculo("resumo_inviavel", {"regime": regime.value, "itens": len(itens)}, level="warning")
        return ResumoGlobal(
            regime=regime,
            status=StatusPreco.INVIAVEL,
            margem_lucro_alvo=params.margem_lucro,
            quantidade_itens=len(itens),
        )

    if not itens:
        return ResumoGlobal(regime=regime, status=StatusPreco.OK, margem_lucro_alvo=params.margem_lucro)

    total_venda = _total(itens, "preco_venda")
    total_imposto = _total(itens, "imposto_a_pagar")
    total_despesas_variaveis = _total(itens, "valor_despesas_variaveis")

    total_lucro = (
        total_venda
        - total_despesas_fixas
        - custo_aquisicao_ajustado
        - total_imposto
        - total_despesas_variaveis
    )

    razao_custo_variavel = (
        (custo_aquisicao_ajustado / total_venda if total_venda > 0 else 0.0)
        + params.total_despesas_variaveis_percent / 100.0
    )
    equilibrio = ponto_equilibrio(
        total_despesas_fixas, razao_custo_variavel, fatores.aliquota_tributos_equilibrio
    )

    resumo = ResumoGlobal(
        regime=regime,
        status=StatusPreco.OK,
        margem_lucro_alvo=params.margem_lucro,
        quantidade_itens=len(itens),
        total_venda=total_venda,
        total_imposto=total_imposto,
        total_imposto_percent=percentual_de(total_imposto, total_venda),
        total_lucro=total_lucro,
        margem_lucro_percent=percentual_de(total_lucro, total_venda),
        ponto_equilibrio=equilibrio,
        total_custo_aquisicao=custo_aquisicao_ajustado,
        total_despesas_fixas=float(total_despesas_fixas),
        total_despesas_variaveis=total_despesas_variaveis,
        total_margem_contribuicao=_total(itens, "margem_contribuicao"),
        total_lucro_alvo=_total(itens, "valor_lucro"),
        total_cbs_credito=_total(itens, "cbs_credito"),
        total_ibs_credito=_total(itens, "ibs_credito"),
        total_cbs_debito=_total(itens, "cbs_debito"),
        total_ibs_debito=_total(itens, "ibs_debito"),
        total_cbs_a_pagar=_total(itens, "cbs_a_pagar"),
        total_ibs_a_pagar=_total(itens, "ibs_a_pagar"),
        total_irpj_a_pagar=_total(itens, "irpj_a_pagar"),
        total_csll_a_pagar=_total(itens, "csll_a_pagar"),
        total_simples_a_pagar=_total(itens, "simples_a_pagar"),
        total_credito_iva_cliente=_total(itens, "credito_iva_cliente"),
        total_unidades_comerciais=sum(p.quantidade for p in itens),
        total_unidades_internas=sum(p.quantidade * p.item.unidades_internas for p in itens),
    )
    log_calculo("resumo", {
        "regime": regime.value,
        "itens": len(itens),
        "total_venda": round(total_venda, 2),
        "total_lucro": round(total_lucro, 2),
    })
    return resumo
