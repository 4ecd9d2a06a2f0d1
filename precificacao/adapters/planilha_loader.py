# precificacao/adapters/planilha_loader.py
"""
Loader de planilhas (XLSX/CSV) com os itens de nota já achatados.

Essas funções:
- leem planilhas usando pandas;
- normalizam cabeçalhos (acentos, variações, sinônimos);
- convertem números no formato brasileiro;
- retornam uma lista de `ItemNota`.

Observações:
- A leitura de XML/ZIP de NF-e não é feita aqui; a planilha já traz uma
  linha por item.
- Quando não há coluna de unidades internas, tentamos extrair a
  quantidade da descrição da embalagem (ex.: "30X300G"); sem isso, 1.
- Créditos negativos são tratados como 0.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from precificacao.adapters.parsers import parse_numero_br, parse_unidades_internas
from precificacao.domain.models import ItemNota
from precificacao.infra.logger import log_file_operation


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Lê um valor da linha tratando NA do pandas como None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    return val


def _normalize_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def _credito(val: Any) -> float:
    return max(0.0, parse_numero_br(val) or 0.0)


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    aliases = {
        "codigo": "codigo",
        "cod": "codigo",
        "cprod": "codigo",
        "codigo do produto": "codigo",

        "nome": "nome",
        "produto": "nome",
        "descricao": "nome",
        "xprod": "nome",
        "nome do produto": "nome",

        "unidade": "unidade",
        "unid": "unidade",
        "un": "unidade",
        "ucom": "unidade",
        "unidade comercial": "unidade",

        "custo": "custo_aquisicao",
        "custo aquisicao": "custo_aquisicao",
        "custo de aquisicao": "custo_aquisicao",
        "valor unitario": "custo_aquisicao",
        "vuncom": "custo_aquisicao",
        "preco unitario": "custo_aquisicao",

        "quantidade": "quantidade",
        "qtd": "quantidade",
        "qtde": "quantidade",
        "qcom": "quantidade",
        "quantidade comercial": "quantidade",

        "unidades internas": "unidades_internas",
        "qtd interna": "unidades_internas",
        "quantidade interna": "unidades_internas",
        "unidades por embalagem": "unidades_internas",

        "pis": "credito_pis",
        "credito pis": "credito_pis",
        "vpis": "credito_pis",

        "cofins": "credito_cofins",
        "credito cofins": "credito_cofins",
        "vcofins": "credito_cofins",

        "icms": "credito_icms",
        "credito icms": "credito_icms",
        "vicms": "credito_icms",

        "cfop": "cfop",
        "cst": "cst",
        "csosn": "cst",
    }

    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = aliases.get(key, key)  # se não houver alias, mantém slug
    return df.rename(columns=new_cols)


def _row_to_item(row) -> Optional[ItemNota]:
    codigo = _normalize_str(_safe_get(row, "codigo"))
    nome = _normalize_str(_safe_get(row, "nome")) or ""
    unidade = _normalize_str(_safe_get(row, "unidade")) or "UN"
    custo = parse_numero_br(_safe_get(row, "custo_aquisicao"))
    if codigo is None and custo is None:
        # linha em branco
        return None

    unidades_internas = parse_numero_br(_safe_get(row, "unidades_internas"))
    if not unidades_internas:
        unidades_internas = parse_unidades_internas(nome) or parse_unidades_internas(unidade) or 1.0

    return ItemNota(
        codigo=codigo or "",
        nome=nome,
        unidade=unidade.upper(),
        custo_aquisicao=custo or 0.0,
        quantidade=parse_numero_br(_safe_get(row, "quantidade")) or 0.0,
        unidades_internas=unidades_internas,
        credito_pis=_credito(_safe_get(row, "credito_pis")),
        credito_cofins=_credito(_safe_get(row, "credito_cofins")),
        credito_icms=_credito(_safe_get(row, "credito_icms")),
        cfop=_normalize_str(_safe_get(row, "cfop")),
        cst=_normalize_str(_safe_get(row, "cst")),
    )


def _separador_csv(path: str) -> str:
    """`;` se o cabeçalho usar ponto e vírgula (comum em planilhas brasileiras)."""
    with open(path, encoding="utf-8-sig") as fh:
        cabecalho = fh.readline()
    return ";" if ";" in cabecalho else ","


def _read_table(path: str) -> pd.DataFrame:
    suffix = Path(path).suffix.lower()
    if suffix in (".xlsx", ".xlsm", ".xls"):
        return pd.read_excel(path, dtype="string")
    if suffix in (".csv", ".txt"):
        return pd.read_csv(path, dtype="string", sep=_separador_csv(path), encoding="utf-8-sig")
    raise ValueError(f"Formato de planilha não suportado: {suffix or path}")


# ---------------------------
# loader público
# ---------------------------

def load_itens_from_planilha(path: str) -> List[ItemNota]:
    """Lê uma planilha de itens e retorna `ItemNota` por linha.

    Colunas reconhecidas (após normalização dos cabeçalhos):
      - codigo, nome, unidade
      - custo_aquisicao (por unidade comercial), quantidade
      - unidades_internas (opcional)
      - credito_pis, credito_cofins, credito_icms (por unidade comercial)
      - cfop, cst (opcionais; padrão 5102 / 101)

    Raises:
        FileNotFoundError: se o arquivo não existir.
        ValueError: se a extensão não for suportada.
    """
    if not Path(path).exists():
        raise FileNotFoundError(path)
    df = _normalize_columns(_read_table(path))
    itens: List[ItemNota] = []
    for _, row in df.iterrows():
        item = _row_to_item(row)
        if item is not None:
            itens.append(item)
    log_file_operation("load_itens", path, rows_processed=len(itens))
    return itens


def itens_to_records(itens: List[ItemNota]) -> List[Dict[str, Any]]:
    """Inverso do loader: registros planos para exportação."""
    return [
        {
            "codigo": i.codigo,
            "nome": i.nome,
            "unidade": i.unidade,
            "custo_aquisicao": i.custo_aquisicao,
            "quantidade": i.quantidade,
            "unidades_internas": i.unidades_internas,
            "credito_pis": i.credito_pis,
            "credito_cofins": i.credito_cofins,
            "credito_icms": i.credito_icms,
            "cfop": i.cfop,
            "cst": i.cst,
        }
        for i in itens
    ]
