"""
Utilidades de parsing para valores vindos de planilhas e formulários.

Este módulo fornece funções para interpretar números no formato
brasileiro (por exemplo, "1.234,56" ou "R$ 10,50"), percentuais
("9,5%"), a quantidade de unidades internas de uma embalagem
(por exemplo, "30X300G") e o nome do regime tributário.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Optional

from precificacao.domain.models import RegimeTributario

_NUM_RE = re.compile(r"[-+]?\d[\d.,]*")
_EMBALAGEM_RE = re.compile(r"(\d+)\s*[xX]\s*\d")


def _sem_acentos(s: str) -> str:
    return "".join(
        ch for ch in unicodedata.normalize("NFKD", s) if not unicodedata.combining(ch)
    )


def parse_numero_br(valor: Any) -> Optional[float]:
    """Interpreta um número em formato brasileiro ou internacional.

    Regras:
        - números (int/float) são devolvidos como float;
        - com vírgula, o ponto é separador de milhar e a vírgula decimal
          ("1.234,56" → 1234.56);
        - sem vírgula, mais de um ponto indica separador de milhar
          ("1.234.567" → 1234567.0); um único ponto é decimal ("10.5"),
          inclusive em "1.234" → 1.234. As planilhas XLSX são lidas como
          texto, e células numéricas chegam com ponto decimal ("0.125");
          milhar com um só ponto precisa vir com vírgula ("1.234,00").

    Exemplos:
        "R$ 1.234,56" → 1234.56
        "10,5"        → 10.5
        "0.35"        → 0.35
        ""            → None

    Args:
        valor: Texto ou número a interpretar.

    Returns:
        O valor como float, ou None se não houver número.
    """
    if valor is None:
        return None
    if isinstance(valor, bool):
        return float(valor)
    if isinstance(valor, (int, float)):
        if valor != valor:  # NaN
            return None
        return float(valor)
    s = str(valor).strip()
    if not s:
        return None
    m = _NUM_RE.search(s.replace(" ", ""))
    if not m:
        return None
    num = m.group(0).rstrip(".,")
    if "," in num:
        num = num.replace(".", "").replace(",", ".")
    elif num.count(".") > 1:
        num = num.replace(".", "")
    try:
        return float(num)
    except ValueError:
        return None


def parse_percentual(valor: Any) -> Optional[float]:
    """Percentual no domínio 0–100 ("9,5%" → 9.5)."""
    return parse_numero_br(valor)


def parse_unidades_internas(txt: Any) -> Optional[float]:
    """Extrai a quantidade de unidades internas de uma embalagem.

    Exemplos:
        "CAIXA 30X300G" → 30.0
        "12 x 1L"       → 12.0
        "UN"            → None
    """
    if txt is None:
        return None
    m = _EMBALAGEM_RE.search(str(txt))
    if not m:
        return None
    n = float(m.group(1))
    return n if n >= 1 else None


_REGIME_ALIASES = {
    "simples": RegimeTributario.SIMPLES_NACIONAL,
    "simples nacional": RegimeTributario.SIMPLES_NACIONAL,
    "simples nacional padrao": RegimeTributario.SIMPLES_NACIONAL,
    "simples padrao": RegimeTributario.SIMPLES_NACIONAL,
    "sn": RegimeTributario.SIMPLES_NACIONAL,
    "simples hibrido": RegimeTributario.SIMPLES_NACIONAL_HIBRIDO,
    "simples nacional hibrido": RegimeTributario.SIMPLES_NACIONAL_HIBRIDO,
    "hibrido": RegimeTributario.SIMPLES_NACIONAL_HIBRIDO,
    "snh": RegimeTributario.SIMPLES_NACIONAL_HIBRIDO,
    "lucro presumido": RegimeTributario.LUCRO_PRESUMIDO,
    "presumido": RegimeTributario.LUCRO_PRESUMIDO,
    "lp": RegimeTributario.LUCRO_PRESUMIDO,
    "lucro real": RegimeTributario.LUCRO_REAL,
    "real": RegimeTributario.LUCRO_REAL,
    "lr": RegimeTributario.LUCRO_REAL,
}


def parse_regime(txt: Any) -> RegimeTributario:
    """Interpreta o nome de um regime tributário.

    Aceita o valor do enum ("Lucro Presumido"), o nome do membro
    ("LUCRO_PRESUMIDO") e apelidos ("LP", "simples híbrido").

    Raises:
        ValueError: se o texto não corresponder a nenhum regime.
    """
    if isinstance(txt, RegimeTributario):
        return txt
    s = _sem_acentos(str(txt or "")).strip().lower().replace("_", " ").replace("-", " ")
    s = re.sub(r"\s+", " ", s)
    regime = _REGIME_ALIASES.get(s)
    if regime is None:
        raise ValueError(f"Regime tributário desconhecido: {txt!r}")
    return regime
