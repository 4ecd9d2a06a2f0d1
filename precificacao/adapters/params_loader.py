# precificacao/adapters/params_loader.py
"""
Leitura dos parâmetros de cálculo a partir de JSON.

Formato esperado (todas as chaves são opcionais; ausentes usam DEFAULTS):

    {
      "regime": "Lucro Presumido",
      "margem_lucro": 9.5,
      "despesas_fixas": [{"nome": "Aluguel", "valor": 3000}],
      "despesas_variaveis": [{"nome": "Comissão", "percentual": 3}],
      "folha_pagamento": 10000,
      "estoque_total_unidades": 5000,
      "percentual_perdas": 2,
      "aliquota_simples": 10,
      "aliquota_simples_remanescente": 4,
      "aliquota_irpj": 1.2,
      "aliquota_csll": 1.08
    }

Valores numéricos podem vir como texto no formato brasileiro ("9,5").
"""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Dict, Optional

from precificacao.adapters.parsers import parse_numero_br, parse_regime
from precificacao.config import DEFAULTS
from precificacao.domain.models import DespesaFixa, DespesaVariavel, Parametros
from precificacao.infra.logger import log_file_operation


_CAMPOS_NUMERICOS = [
    f.name for f in fields(Parametros)
    if f.name not in ("despesas_fixas", "despesas_variaveis", "regime")
]


def _numero(data: Dict[str, Any], chave: str) -> float:
    val = parse_numero_br(data.get(chave))
    if val is None:
        return float(getattr(DEFAULTS, chave))
    return val


def parametros_from_dict(data: Dict[str, Any]) -> Parametros:
    """Monta `Parametros` a partir de um dicionário (JSON já decodificado).

    Raises:
        ValueError: se o regime for desconhecido.
    """
    data = data or {}
    kwargs: Dict[str, Any] = {chave: _numero(data, chave) for chave in _CAMPOS_NUMERICOS}
    if data.get("regime"):
        kwargs["regime"] = parse_regime(data["regime"])
    kwargs["despesas_fixas"] = tuple(
        DespesaFixa(nome=str(d.get("nome", "")), valor=parse_numero_br(d.get("valor")) or 0.0)
        for d in data.get("despesas_fixas") or []
    )
    kwargs["despesas_variaveis"] = tuple(
        DespesaVariavel(nome=str(d.get("nome", "")), percentual=parse_numero_br(d.get("percentual")) or 0.0)
        for d in data.get("despesas_variaveis") or []
    )
    return Parametros(**kwargs)


def parametros_to_dict(params: Parametros) -> Dict[str, Any]:
    out = asdict(params)
    out["regime"] = params.regime.value
    return out


def load_parametros_from_json(path: Optional[str]) -> Parametros:
    """Lê o JSON de parâmetros; ``None`` retorna os parâmetros padrão.

    Raises:
        FileNotFoundError: se o arquivo não existir.
        ValueError: se o JSON for inválido ou o regime desconhecido.
    """
    if path is None:
        return Parametros()
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"JSON de parâmetros inválido ({path}): {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"JSON de parâmetros deve ser um objeto: {path}")
    params = parametros_from_dict(data)
    log_file_operation("load_params", path, rows_processed=1, regime=params.regime.value)
    return params
