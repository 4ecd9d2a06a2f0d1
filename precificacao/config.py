# precificacao/config.py
"""
Configurações globais e valores padrão da precificação.
"""

from dataclasses import dataclass


# Alíquotas fixas do IVA dual (já divididas por 100)
CBS_RATE = 0.088  # 8,8%
IBS_RATE = 0.177  # 17,7%

# Classificação fiscal padrão quando a origem não informa
CFOP_PADRAO = "5102"
CST_PADRAO = "101"

# Divisores abaixo deste valor são tratados como zero (ruído de ponto flutuante)
TOLERANCIA_DIVISOR = 1e-9


@dataclass
class DefaultConfig:
    """Valores padrão para os parâmetros de cálculo."""
    margem_lucro: float = 9.5  # % sobre o preço de venda
    aliquota_simples: float = 10.0  # alíquota cheia do Simples Nacional
    aliquota_simples_remanescente: float = 0.0  # usada só no Simples híbrido
    aliquota_irpj: float = 1.2  # Lucro Presumido
    aliquota_csll: float = 1.08  # Lucro Presumido
    aliquota_irpj_lucro_real: float = 0.0
    aliquota_csll_lucro_real: float = 0.0
    aliquota_inss_patronal: float = 0.0
    folha_pagamento: float = 10000.0
    estoque_total_unidades: float = 5000.0  # ETU, base do rateio
    percentual_perdas: float = 0.0


# Instância global dos valores padrão
DEFAULTS = DefaultConfig()
