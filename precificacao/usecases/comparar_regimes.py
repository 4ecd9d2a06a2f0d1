# precificacao/usecases/comparar_regimes.py
"""
Caso de uso: comparar regimes tributários.

Fluxo:
1) Para cada regime candidato, clona os parâmetros com o regime trocado
   (e, opcionalmente, a margem de lucro forçada).
2) Consolida os custos fixos do cenário e calcula o CFU.
3) Precifica todos os itens e agrega o resumo global.
4) Escolhe o regime com o maior lucro líquido total.

Observações:
- Empates mantêm o primeiro candidato avaliado (ordem padrão: Simples
  Nacional padrão, Lucro Presumido, Lucro Real).
- Cenários inviáveis não concorrem. Se nenhum for viável, `melhor` é None.
- Com `margem_lucro=0` o mesmo mecanismo produz o cenário de venda mínima.
- O "cenário atual" (itens + parâmetros) é passado explicitamente em um
  `ContextoSimulacao`, com a seleção opcional de itens por código; não há
  estado compartilhado entre chamadas.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from precificacao.domain.formulas import custo_fixo_unitario
from precificacao.domain.models import (
    ItemCalculado,
    ItemNota,
    Parametros,
    RegimeTributario,
    ResumoGlobal,
)
from precificacao.domain.policies import total_despesas_fixas
from precificacao.infra.logger import log_comparacao, log_system_event
from precificacao.usecases.precificar_item import precificar_itens
from precificacao.usecases.resumo_global import resumir


REGIMES_COMPARACAO: Tuple[RegimeTributario, ...] = (
    RegimeTributario.SIMPLES_NACIONAL,
    RegimeTributario.LUCRO_PRESUMIDO,
    RegimeTributario.LUCRO_REAL,
)


def selecionar_itens(
    itens: Sequence[ItemNota],
    codigos: Optional[Iterable[str]] = None,
) -> List[ItemNota]:
    """Filtra os itens pelos códigos selecionados, mantendo a ordem da nota.

    ``None`` seleciona todos os itens.
    """
    if codigos is None:
        return list(itens)
    escolhidos = {str(c) for c in codigos}
    return [i for i in itens if i.codigo in escolhidos]


@dataclass(frozen=True)
class ContextoSimulacao:
    """Itens, parâmetros e seleção do cenário corrente, passados explicitamente.

    `codigos` restringe o cálculo aos itens selecionados; ``None`` usa todos.
    """
    itens: Tuple[ItemNota, ...]
    parametros: Parametros
    codigos: Optional[FrozenSet[str]] = None

    @classmethod
    def criar(
        cls,
        itens: Sequence[ItemNota],
        parametros: Parametros,
        codigos: Optional[Iterable[str]] = None,
    ) -> "ContextoSimulacao":
        selecao = frozenset(str(c) for c in codigos) if codigos is not None else None
        return cls(itens=tuple(itens), parametros=parametros, codigos=selecao)

    @property
    def itens_selecionados(self) -> Tuple[ItemNota, ...]:
        return tuple(selecionar_itens(self.itens, self.codigos))


@dataclass(frozen=True)
class CenarioRegime:
    """Um cenário calculado: parâmetros efetivos, itens e resumo."""
    regime: RegimeTributario
    parametros: Parametros
    total_despesas_fixas: float
    cfu: float
    itens: Tuple[ItemCalculado, ...]
    resumo: ResumoGlobal


@dataclass(frozen=True)
class ResultadoComparacao:
    cenarios: Tuple[CenarioRegime, ...]
    melhor: Optional[RegimeTributario]

    @property
    def resumos(self) -> Tuple[ResumoGlobal, ...]:
        return tuple(c.resumo for c in self.cenarios)

    @property
    def cenario_melhor(self) -> Optional[CenarioRegime]:
        for c in self.cenarios:
            if c.regime is self.melhor:
                return c
        return None

    def cenario(self, regime: RegimeTributario) -> Optional[CenarioRegime]:
        for c in self.cenarios:
            if c.regime is regime:
                return c
        return None


def calcular_cenario(
    itens: Sequence[ItemNota],
    parametros: Parametros,
    regime: Optional[RegimeTributario] = None,
    margem_lucro: Optional[float] = None,
) -> CenarioRegime:
    """Precifica e resume um conjunto de itens sob um único cenário.

    Args:
        itens: Itens da nota.
        parametros: Parâmetros base.
        regime: Regime a aplicar; ``None`` mantém ``parametros.regime``.
        margem_lucro: Margem forçada (ex.: 0 para venda mínima); ``None``
            mantém ``parametros.margem_lucro``.
    """
    overrides = {}
    if regime is not None:
        overrides["regime"] = regime
    if margem_lucro is not None:
        overrides["margem_lucro"] = float(margem_lucro)
    params = replace(parametros, **overrides) if overrides else parametros

    cft = total_despesas_fixas(params)
    cfu = custo_fixo_unitario(cft, params.estoque_total_unidades)
    calculados = precificar_itens(itens, params, cfu)
    resumo = resumir(calculados, params, cft)
    return CenarioRegime(
        regime=params.regime,
        parametros=params,
        total_despesas_fixas=cft,
        cfu=cfu,
        itens=tuple(calculados),
        resumo=resumo,
    )


def comparar_regimes(
    itens: Sequence[ItemNota],
    parametros: Parametros,
    regimes: Sequence[RegimeTributario] = REGIMES_COMPARACAO,
    margem_lucro: Optional[float] = None,
) -> ResultadoComparacao:
    """Calcula um cenário por regime e escolhe o de maior lucro líquido.

    Args:
        itens: Itens da nota (mantidos fixos entre os cenários).
        parametros: Parâmetros base; apenas o regime (e a margem, se
            informada) variam entre os cenários.
        regimes: Candidatos, na ordem de avaliação.
        margem_lucro: Margem de lucro forçada para todos os cenários.

    Returns:
        ``ResultadoComparacao`` com um cenário por regime e o vencedor.
    """
    log_system_event("comparar_regimes_start", {
        "itens": len(itens),
        "regimes": [r.value for r in regimes],
        "margem_lucro": margem_lucro,
    })

    cenarios = tuple(
        calcular_cenario(itens, parametros, regime=r, margem_lucro=margem_lucro)
        for r in regimes
    )

    melhor: Optional[CenarioRegime] = None
    for c in cenarios:
        if not c.resumo.viavel:
            continue
        if melhor is None or c.resumo.total_lucro > melhor.resumo.total_lucro:
            melhor = c

    log_comparacao(
        [r.value for r in regimes],
        melhor.regime.value if melhor else None,
        {"lucros": {c.regime.value: round(c.resumo.total_lucro, 2) for c in cenarios}},
    )
    return ResultadoComparacao(cenarios=cenarios, melhor=melhor.regime if melhor else None)


def comparar_contexto(
    contexto: ContextoSimulacao,
    regimes: Sequence[RegimeTributario] = REGIMES_COMPARACAO,
    margem_lucro: Optional[float] = None,
) -> ResultadoComparacao:
    """Compara regimes apenas para os itens selecionados no contexto."""
    return comparar_regimes(contexto.itens_selecionados, contexto.parametros, regimes, margem_lucro)


def cenario_venda_minima(
    itens: Sequence[ItemNota],
    parametros: Parametros,
    regimes: Sequence[RegimeTributario] = REGIMES_COMPARACAO,
) -> ResultadoComparacao:
    """Comparativo com margem de lucro zerada (venda mínima viável)."""
    return comparar_regimes(itens, parametros, regimes, margem_lucro=0.0)
