"""
Fórmulas matemáticas da precificação por markup divisor.

Estas funções implementam os cálculos básicos usados pelo motor de
preços: rateio do custo fixo por unidade, ajuste de perdas, divisor de
markup e conversões por unidade interna.

Todas as funções são puras: dependem apenas das entradas e não
alteram estado externo. Nenhuma delas levanta exceção por divisão por
zero; os casos degenerados retornam 0 (ou infinito, no caso explícito
de perda total, que existe só para disparar a inviabilidade).
"""

from math import inf, isinf
from typing import Iterable, Union

from precificacao.config import TOLERANCIA_DIVISOR

Numero = Union[int, float]


def custo_fixo_unitario(total_despesas_fixas: Numero, estoque_total_unidades: Numero) -> float:
    """Compute the fixed cost per unit (CFU).

    Parameters
    ----------
    total_despesas_fixas: float
        Fixed-cost pool (fixed expenses + payroll + payroll charges).
    estoque_total_unidades: float
        Total stock in commercial units, used as the allocation base.

    Returns
    -------
    float
        ``total_despesas_fixas / estoque_total_unidades``, or 0 when the
        allocation base is not positive.
    """
    etu = float(estoque_total_unidades or 0.0)
    if etu <= 0.0:
        return 0.0
    return float(total_despesas_fixas) / etu


def ajustar_perdas(custo: Numero, percentual_perdas: Numero) -> float:
    """Inflate a cost for shrinkage/breakage.

    ``0 < perdas < 100`` divides the cost by ``1 - perdas/100``. A loss of
    100% or more means no finite price recovers the cost, so the result is
    ``math.inf``. Zero or negative losses leave the cost unchanged.
    """
    custo = float(custo)
    perdas = float(percentual_perdas or 0.0)
    if perdas >= 100.0:
        return inf
    if perdas > 0.0:
        return custo / (1.0 - perdas / 100.0)
    return custo


def divisor_markup(termo_percentual: Numero) -> float:
    """Markup divisor ``1 - Σ(percentage-of-price charges)``."""
    return 1.0 - float(termo_percentual)


def divisor_valido(divisor: Numero) -> bool:
    return float(divisor) > TOLERANCIA_DIVISOR


def custo_base_valido(custo_base: Numero) -> bool:
    return not isinf(float(custo_base))


def preco_por_divisor(custo_base: Numero, divisor: Numero) -> float:
    """Price from the markup divisor method; falls back to the cost itself
    when the divisor is not positive."""
    if not divisor_valido(divisor):
        return float(custo_base)
    return float(custo_base) / float(divisor)


def percentual_markup(preco_venda: Numero, custo_aquisicao: Numero) -> float:
    """Realized markup over the original acquisition cost, in %."""
    custo = float(custo_aquisicao)
    if custo <= 0.0:
        return 0.0
    return (float(preco_venda) - custo) / custo * 100.0


def percentual_de(parte: Numero, total: Numero) -> float:
    total = float(total)
    if total == 0.0:
        return 0.0
    return float(parte) / total * 100.0


def por_unidade_interna(valor: Numero, unidades_internas: Numero) -> float:
    fator = float(unidades_internas or 0.0)
    if fator < 1.0:
        fator = 1.0
    return float(valor) / fator


def soma_ponderada(valores: Iterable[Numero], pesos: Iterable[Numero]) -> float:
    """Σ valor_i × peso_i (used for value × commercial quantity totals)."""
    return sum(float(v) * float(p) for v, p in zip(valores, pesos))
