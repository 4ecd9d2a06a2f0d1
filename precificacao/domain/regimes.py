# precificacao/domain/regimes.py
"""
Regras por regime tributário.

Os quatro regimes compartilham o mesmo esqueleto de cálculo
(``preço = custo / (1 - Σ termos percentuais)``) e diferem apenas nos
termos incluídos e nas linhas de débito que se aplicam. Este módulo
monta esses termos de forma declarativa, para que as fórmulas de preço
de venda e de preço mínimo existam em um único lugar.

Regras:
    - Lucro Presumido / Lucro Real:
        markup  = (desp. variáveis + IRPJ + CSLL + margem)/100 + CBS + IBS
        mínimo  = desp. variáveis/100 + CBS + IBS
        débitos = CBS, IBS, IRPJ, CSLL
    - Simples Nacional (padrão, sem crédito de IVA):
        markup  = (desp. variáveis + Simples + margem)/100
        mínimo  = (desp. variáveis + Simples)/100
        débitos = Simples sobre o preço
    - Simples Nacional híbrido (gera crédito de IVA ao comprador):
        markup  = (desp. variáveis + Simples remanescente + margem)/100 + CBS + IBS
        mínimo  = (desp. variáveis + Simples remanescente)/100 + CBS + IBS
        débitos = Simples remanescente, CBS, IBS
"""

from __future__ import annotations

from dataclasses import dataclass

from precificacao.config import CBS_RATE, IBS_RATE
from precificacao.domain.models import Parametros, RegimeTributario


@dataclass(frozen=True)
class FatoresRegime:
    """Termos percentuais (domínio 0–1) e linhas de débito de um regime."""
    termo_markup: float
    termo_preco_minimo: float
    aplica_debito_cbs_ibs: bool
    aplica_irpj_csll: bool
    aplica_simples: bool
    aliquota_simples: float = 0.0  # 0–100, cheia ou remanescente
    aliquota_irpj: float = 0.0  # 0–100
    aliquota_csll: float = 0.0  # 0–100
    aliquota_tributos_equilibrio: float = 0.0  # 0–1, carga usada no ponto de equilíbrio


def fatores_regime(regime: RegimeTributario, params: Parametros) -> FatoresRegime:
    """Monta os fatores do regime informado a partir dos parâmetros.

    Args:
        regime: Regime tributário a aplicar (ignora ``params.regime``).
        params: Parâmetros globais com as alíquotas.

    Returns:
        ``FatoresRegime`` com o termo do markup, o termo do preço mínimo e
        as linhas de débito aplicáveis.
    """
    variaveis = params.total_despesas_variaveis_percent
    margem = params.margem_lucro
    iva = CBS_RATE + IBS_RATE

    if regime in (RegimeTributario.LUCRO_PRESUMIDO, RegimeTributario.LUCRO_REAL):
        if regime is RegimeTributario.LUCRO_PRESUMIDO:
            irpj, csll = params.aliquota_irpj, params.aliquota_csll
        else:
            irpj, csll = params.aliquota_irpj_lucro_real, params.aliquota_csll_lucro_real
        return FatoresRegime(
            termo_markup=(variaveis + irpj + csll + margem) / 100.0 + iva,
            termo_preco_minimo=variaveis / 100.0 + iva,
            aplica_debito_cbs_ibs=True,
            aplica_irpj_csll=True,
            aplica_simples=False,
            aliquota_irpj=irpj,
            aliquota_csll=csll,
            aliquota_tributos_equilibrio=iva,
        )

    if regime is RegimeTributario.SIMPLES_NACIONAL_HIBRIDO:
        simples = params.aliquota_simples_remanescente
        return FatoresRegime(
            termo_markup=(variaveis + simples + margem) / 100.0 + iva,
            termo_preco_minimo=(variaveis + simples) / 100.0 + iva,
            aplica_debito_cbs_ibs=True,
            aplica_irpj_csll=False,
            aplica_simples=True,
            aliquota_simples=simples,
            aliquota_tributos_equilibrio=simples / 100.0 + iva,
        )

    if regime is RegimeTributario.SIMPLES_NACIONAL:
        simples = params.aliquota_simples
        return FatoresRegime(
            termo_markup=(variaveis + simples + margem) / 100.0,
            termo_preco_minimo=(variaveis + simples) / 100.0,
            aplica_debito_cbs_ibs=False,
            aplica_irpj_csll=False,
            aplica_simples=True,
            aliquota_simples=simples,
            aliquota_tributos_equilibrio=simples / 100.0,
        )

    raise ValueError(f"Regime tributário desconhecido: {regime!r}")
