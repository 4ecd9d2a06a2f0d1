"""
Políticas de cálculo e utilidades para a precificação.

Este módulo contém funções que encapsulam regras de negócio de
viabilidade de preço, de exibição de tributos e de consolidação dos
custos fixos. As funções aqui expostas são utilizadas pela camada de
aplicação ao precificar itens e ao montar os resumos globais.
"""

from __future__ import annotations

from typing import Optional

from precificacao.domain.formulas import custo_base_valido, divisor_valido
from precificacao.domain.models import Parametros, RegimeTributario, StatusPreco


def status_preco(divisor: float, custo_base: float) -> StatusPreco:
    """Classifica a viabilidade de um preço.

    Regras:
        - divisor de markup <= 0 → ``INVIAVEL`` (os percentuais somam 100% ou mais)
        - custo base infinito (perdas >= 100%) → ``INVIAVEL``
        - caso contrário → ``OK``

    Args:
        divisor: Divisor de markup ``1 - Σ termos``.
        custo_base: Custo base já ajustado por perdas.

    Returns:
        ``StatusPreco.OK`` ou ``StatusPreco.INVIAVEL``.
    """
    if not divisor_valido(divisor) or not custo_base_valido(custo_base):
        return StatusPreco.INVIAVEL
    return StatusPreco.OK


def piso_zero(valor: float) -> float:
    """Tributo líquido para exibição: nunca negativo."""
    return max(0.0, float(valor))


def total_despesas_fixas(params: Parametros, regime: Optional[RegimeTributario] = None) -> float:
    """Consolida os custos fixos totais (CFT).

    ``Σ despesas fixas + folha + INSS patronal``. O INSS patronal incide
    sobre a folha apenas fora do Simples Nacional, que já o recolhe dentro
    da alíquota única.

    Args:
        params: Parâmetros globais.
        regime: Regime a considerar; ``None`` usa ``params.regime``.
    """
    regime = regime or params.regime
    fixas = sum(d.valor for d in params.despesas_fixas)
    folha = float(params.folha_pagamento or 0.0)
    inss = 0.0
    if not regime.is_simples:
        inss = folha * (params.aliquota_inss_patronal / 100.0)
    return fixas + folha + inss
