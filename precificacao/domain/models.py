# precificacao/domain/models.py
"""
Modelos (dataclasses) do domínio de precificação.

Observação importante:
- Todos os modelos são imutáveis (frozen). O motor de cálculo sempre
  produz novos objetos; nada é alterado depois de criado.
- Percentuais de parâmetros estão no domínio 0–100. Apenas CBS_RATE e
  IBS_RATE (em `precificacao.config`) estão no domínio 0–1.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from precificacao.config import CFOP_PADRAO, CST_PADRAO, DEFAULTS


class RegimeTributario(str, Enum):
    """Regimes tributários mutuamente exclusivos."""
    SIMPLES_NACIONAL = "Simples Nacional"
    SIMPLES_NACIONAL_HIBRIDO = "Simples Nacional Híbrido"
    LUCRO_PRESUMIDO = "Lucro Presumido"
    LUCRO_REAL = "Lucro Real"

    @property
    def is_simples(self) -> bool:
        return self in (RegimeTributario.SIMPLES_NACIONAL, RegimeTributario.SIMPLES_NACIONAL_HIBRIDO)


class StatusPreco(str, Enum):
    OK = "OK"
    INVIAVEL = "PREÇO INVIÁVEL"


@dataclass(frozen=True)
class DespesaFixa:
    nome: str
    valor: float


@dataclass(frozen=True)
class DespesaVariavel:
    """Despesa variável expressa em % do preço de venda."""
    nome: str
    percentual: float


@dataclass(frozen=True)
class ItemNota:
    """Uma linha de nota fiscal, por unidade comercial (ex.: caixa)."""
    codigo: str
    nome: str
    unidade: str
    custo_aquisicao: float
    quantidade: float
    unidades_internas: float = 1.0  # ex.: 30 em "30X300G"
    credito_pis: float = 0.0
    credito_cofins: float = 0.0
    credito_icms: float = 0.0
    cfop: Optional[str] = None
    cst: Optional[str] = None

    def __post_init__(self) -> None:
        # ausente ou zero -> 1
        if not self.unidades_internas or self.unidades_internas < 1:
            object.__setattr__(self, "unidades_internas", 1.0)
        object.__setattr__(self, "cfop", self.cfop or CFOP_PADRAO)
        object.__setattr__(self, "cst", self.cst or CST_PADRAO)


@dataclass(frozen=True)
class Parametros:
    """Parâmetros globais de uma rodada de cálculo."""
    margem_lucro: float = DEFAULTS.margem_lucro
    despesas_fixas: Tuple[DespesaFixa, ...] = ()
    despesas_variaveis: Tuple[DespesaVariavel, ...] = ()
    folha_pagamento: float = DEFAULTS.folha_pagamento
    estoque_total_unidades: float = DEFAULTS.estoque_total_unidades
    percentual_perdas: float = DEFAULTS.percentual_perdas
    regime: RegimeTributario = RegimeTributario.LUCRO_PRESUMIDO
    aliquota_simples: float = DEFAULTS.aliquota_simples
    aliquota_simples_remanescente: float = DEFAULTS.aliquota_simples_remanescente
    aliquota_irpj: float = DEFAULTS.aliquota_irpj
    aliquota_csll: float = DEFAULTS.aliquota_csll
    aliquota_irpj_lucro_real: float = DEFAULTS.aliquota_irpj_lucro_real
    aliquota_csll_lucro_real: float = DEFAULTS.aliquota_csll_lucro_real
    aliquota_inss_patronal: float = DEFAULTS.aliquota_inss_patronal

    @property
    def total_despesas_variaveis_percent(self) -> float:
        return sum(d.percentual for d in self.despesas_variaveis)


@dataclass(frozen=True)
class ValoresUnidadeInterna:
    """Espelho dos valores monetários de um item por unidade interna."""
    custo_aquisicao: float = 0.0
    custo_efetivo: float = 0.0
    custo_base: float = 0.0
    preco_venda: float = 0.0
    preco_minimo: float = 0.0
    cbs_credito: float = 0.0
    ibs_credito: float = 0.0
    cbs_debito: float = 0.0
    ibs_debito: float = 0.0
    cbs_a_pagar: float = 0.0
    ibs_a_pagar: float = 0.0
    irpj_a_pagar: float = 0.0
    csll_a_pagar: float = 0.0
    simples_a_pagar: float = 0.0
    imposto_a_pagar: float = 0.0
    credito_iva_cliente: float = 0.0
    valor_impostos: float = 0.0
    valor_despesas_variaveis: float = 0.0
    valor_custo_fixo: float = 0.0
    valor_perdas: float = 0.0
    valor_lucro: float = 0.0
    margem_contribuicao: float = 0.0
    lucro_liquido: float = 0.0


@dataclass(frozen=True)
class ItemCalculado:
    """Resultado da precificação de um `ItemNota` (valores por unidade comercial).

    `cbs_liquido` e `ibs_liquido` guardam a diferença débito - crédito com
    sinal; os campos `*_a_pagar` são os mesmos valores limitados a zero.
    """
    item: ItemNota
    regime: RegimeTributario
    status: StatusPreco
    custo_efetivo: float = 0.0
    custo_base: float = 0.0
    preco_venda: float = 0.0
    preco_minimo: float = 0.0
    cbs_credito: float = 0.0
    ibs_credito: float = 0.0
    cbs_debito: float = 0.0
    ibs_debito: float = 0.0
    cbs_liquido: float = 0.0
    ibs_liquido: float = 0.0
    cbs_a_pagar: float = 0.0
    ibs_a_pagar: float = 0.0
    irpj_a_pagar: float = 0.0
    csll_a_pagar: float = 0.0
    simples_a_pagar: float = 0.0
    imposto_a_pagar: float = 0.0
    credito_iva_cliente: float = 0.0
    markup_percent: float = 0.0
    # composição do preço de venda
    valor_impostos: float = 0.0
    valor_despesas_variaveis: float = 0.0
    valor_custo_fixo: float = 0.0
    valor_perdas: float = 0.0
    valor_lucro: float = 0.0
    margem_contribuicao: float = 0.0
    lucro_liquido: float = 0.0  # venda - aquisição - imposto a pagar - variáveis - CFU
    unidade_interna: ValoresUnidadeInterna = field(default_factory=ValoresUnidadeInterna)

    @property
    def viavel(self) -> bool:
        return self.status is StatusPreco.OK

    @property
    def codigo(self) -> str:
        return self.item.codigo

    @property
    def quantidade(self) -> float:
        return self.item.quantidade

    @property
    def custo_aquisicao(self) -> float:
        return self.item.custo_aquisicao


@dataclass(frozen=True)
class ResumoGlobal:
    """Agregado de um conjunto de itens sob um cenário (regime + margem)."""
    regime: RegimeTributario
    status: StatusPreco
    margem_lucro_alvo: float
    quantidade_itens: int = 0
    total_venda: float = 0.0
    total_imposto: float = 0.0
    total_imposto_percent: float = 0.0
    total_lucro: float = 0.0
    margem_lucro_percent: float = 0.0
    ponto_equilibrio: float = 0.0
    total_custo_aquisicao: float = 0.0
    total_despesas_fixas: float = 0.0
    total_despesas_variaveis: float = 0.0
    total_margem_contribuicao: float = 0.0
    total_lucro_alvo: float = 0.0
    total_cbs_credito: float = 0.0
    total_ibs_credito: float = 0.0
    total_cbs_debito: float = 0.0
    total_ibs_debito: float = 0.0
    total_cbs_a_pagar: float = 0.0
    total_ibs_a_pagar: float = 0.0
    total_irpj_a_pagar: float = 0.0
    total_csll_a_pagar: float = 0.0
    total_simples_a_pagar: float = 0.0
    total_credito_iva_cliente: float = 0.0
    total_unidades_comerciais: float = 0.0
    total_unidades_internas: float = 0.0

    @property
    def viavel(self) -> bool:
        return self.status is StatusPreco.OK
