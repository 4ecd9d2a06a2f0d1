# precificacao/adapters/cli.py
"""
CLI da precificação (Typer).

Comandos principais:
- precificar <planilha>   -> preço sugerido, mínimo e tributos por item + resumo global
- comparar <planilha>     -> comparativo de regimes (maior lucro líquido)
- resumo <planilha>       -> resumo executivo, melhor venda x venda mínima, opção híbrida
  (os três aceitam --codigo/-c, repetível, para restringir os itens)
- params show             -> parâmetros efetivos (com fallback para defaults)
"""

from __future__ import annotations

import json
from dataclasses import asdict, replace
from enum import Enum
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich import box

from precificacao.adapters.params_loader import load_parametros_from_json, parametros_to_dict
from precificacao.adapters.parsers import parse_regime
from precificacao.adapters.planilha_loader import load_itens_from_planilha
from precificacao.config import CBS_RATE, IBS_RATE, DEFAULTS
from precificacao.domain.models import ResumoGlobal, StatusPreco
from precificacao.usecases.comparar_regimes import (
    calcular_cenario,
    comparar_regimes,
    selecionar_itens,
)
from precificacao.usecases.relatorios import (
    custo_opcao_hibrida,
    itens_para_registros,
    resultado_geral,
    resumo_executivo,
)


app = typer.Typer(help="Precificação CBS/IBS — CLI")
console = Console()

MSG_INVIAVEL = (
    "A soma das despesas percentuais, tributos e margem de lucro é igual ou superior "
    "a 100%, ou a porcentagem de perdas é inviável. Ajuste os parâmetros para um "
    "cálculo válido."
)


# -----------------------
# util
# -----------------------

def _fmt_num(val: float) -> str:
    return f"{val:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


def _fmt_brl(val: float) -> str:
    return f"R$ {_fmt_num(val)}"


def _fmt_pct(val: float) -> str:
    return f"{_fmt_num(val)}%"


def _json_default(obj: Any):
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Tipo não serializável: {type(obj).__name__}")


def _print_json(obj) -> None:
    typer.echo(json.dumps(obj, ensure_ascii=False, indent=2, default=_json_default))


def _carregar(
    itens_path: str,
    params_path: Optional[str],
    regime: Optional[str],
    codigos: Optional[List[str]] = None,
):
    """Carrega itens e parâmetros, convertendo erros de entrada em saída de erro.

    `codigos` restringe os itens aos selecionados (vazio ou None: todos).
    """
    try:
        itens = load_itens_from_planilha(itens_path)
        params = load_parametros_from_json(params_path)
        if regime:
            params = replace(params, regime=parse_regime(regime))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Erro:[/] {e}")
        raise typer.Exit(code=1)
    if codigos:
        itens = selecionar_itens(itens, codigos)
        if not itens:
            console.print(f"[bold red]Erro:[/] nenhum item com os códigos {', '.join(codigos)}")
            raise typer.Exit(code=1)
    return itens, params


def _painel_inviavel(titulo: str = "Cálculo Global Inviável") -> None:
    console.print(Panel(MSG_INVIAVEL, title=f"⚠️ {titulo}", border_style="red"))


def _tabela_itens(registros: List[Dict[str, Any]], title: str) -> None:
    table = Table(title=title, box=box.ROUNDED)
    colunas = [
        ("codigo", "Código"), ("nome", "Produto"), ("quantidade", "Qtd."),
        ("custo_aquisicao", "Custo Aquisição"), ("custo_fixo", "Custo Fixo Rateado"),
        ("markup_percent", "Markup %"), ("preco_venda", "Venda Sug."),
        ("preco_minimo", "Venda Mín."), ("preco_venda_unidade_interna", "Venda Unid. Interna"),
        ("imposto_a_pagar", "Imposto Líq."), ("credito_iva_cliente", "Crédito Cliente"),
        ("lucro_liquido", "Lucro Líq."), ("status", "Status"),
    ]
    for chave, titulo in colunas:
        justify = "right" if chave not in ("codigo", "nome", "status") else "left"
        table.add_column(titulo, justify=justify)

    for reg in registros:
        valores = []
        for chave, _ in colunas:
            val = reg.get(chave, "")
            if chave == "status":
                cor = "green" if val == StatusPreco.OK.value else "red"
                valores.append(f"[bold {cor}]{val}[/]")
            elif chave == "markup_percent":
                valores.append(_fmt_pct(val))
            elif chave == "quantidade":
                valores.append(_fmt_num(val))
            elif isinstance(val, (int, float)) and not isinstance(val, bool):
                valores.append(_fmt_brl(val))
            else:
                valores.append(str(val))
        table.add_row(*valores)
    console.print(table)


def _linhas_resumo(r: ResumoGlobal) -> List[tuple]:
    return [
        ("Venda Total Sugerida", _fmt_brl(r.total_venda)),
        ("Impostos Líquidos Totais", f"{_fmt_brl(r.total_imposto)} ({_fmt_pct(r.total_imposto_percent)})"),
        ("Despesas Variáveis Totais", _fmt_brl(r.total_despesas_variaveis)),
        ("Margem de Contribuição Total", _fmt_brl(r.total_margem_contribuicao)),
        ("Lucro Líquido Total", _fmt_brl(r.total_lucro)),
        ("Margem de Lucro Líquida %", _fmt_pct(r.margem_lucro_percent)),
        ("Ponto de Equilíbrio (Mensal)", _fmt_brl(r.ponto_equilibrio)),
        ("Crédito de IVA ao Cliente", _fmt_brl(r.total_credito_iva_cliente)),
    ]


def _tabela_resumo(r: ResumoGlobal, title: str) -> None:
    if not r.viavel:
        _painel_inviavel()
        return
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("Métrica")
    table.add_column("Valor", justify="right")
    for nome, valor in _linhas_resumo(r):
        table.add_row(nome, valor)
    console.print(table)


def _resumo_dict(r: ResumoGlobal) -> Dict[str, Any]:
    out = asdict(r)
    out["viavel"] = r.viavel
    return out


# -----------------------
# comandos de cálculo
# -----------------------

@app.command("precificar")
def cmd_precificar(
    itens_path: str = typer.Argument(..., help="Planilha de itens (XLSX ou CSV)"),
    params_path: Optional[str] = typer.Option(None, "--params", "-p", help="JSON de parâmetros"),
    regime: Optional[str] = typer.Option(None, "--regime", "-r", help="Ex.: 'Lucro Presumido', 'simples', 'hibrido'"),
    codigos: Optional[List[str]] = typer.Option(None, "--codigo", "-c", help="Código do item a considerar (repetível)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
):
    """Calcula preço sugerido, preço mínimo e tributos por item."""
    itens, params = _carregar(itens_path, params_path, regime, codigos)
    cenario = calcular_cenario(itens, params)
    registros = itens_para_registros(cenario.itens)

    if as_json:
        _print_json({
            "regime": cenario.regime.value,
            "cfu": cenario.cfu,
            "total_despesas_fixas": cenario.total_despesas_fixas,
            "itens": registros,
            "resumo": _resumo_dict(cenario.resumo),
        })
        return

    console.print(Panel(
        "\n".join([
            f"Regime Tributário: {cenario.regime.value}",
            f"Margem de Lucro Alvo: {_fmt_pct(params.margem_lucro)}",
            f"Alíquotas IVA: CBS ({_fmt_pct(CBS_RATE * 100)}), IBS ({_fmt_pct(IBS_RATE * 100)})",
            f"Custos Fixos Totais (CFT): {_fmt_brl(cenario.total_despesas_fixas)}",
            f"Estoque Total de Unidades (ETU): {_fmt_num(params.estoque_total_unidades)}",
            f"Custo Fixo por Unidade (CFU): {_fmt_brl(cenario.cfu)}",
            f"Perdas e Quebras: {_fmt_pct(params.percentual_perdas)}",
        ]),
        title="Parâmetros da Simulação",
    ))
    if not cenario.resumo.viavel:
        _painel_inviavel()
        return
    _tabela_itens(registros, title=f"Precificação ({len(registros)} itens)")
    _tabela_resumo(cenario.resumo, title="Resumo Global")


@app.command("comparar")
def cmd_comparar(
    itens_path: str = typer.Argument(..., help="Planilha de itens (XLSX ou CSV)"),
    params_path: Optional[str] = typer.Option(None, "--params", "-p", help="JSON de parâmetros"),
    venda_minima: bool = typer.Option(False, "--venda-minima", help="Força margem de lucro 0%"),
    codigos: Optional[List[str]] = typer.Option(None, "--codigo", "-c", help="Código do item a considerar (repetível)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
):
    """Compara Simples Nacional, Lucro Presumido e Lucro Real."""
    itens, params = _carregar(itens_path, params_path, None, codigos)
    res = comparar_regimes(itens, params, margem_lucro=0.0 if venda_minima else None)

    if as_json:
        _print_json({
            "melhor": res.melhor.value if res.melhor else None,
            "cenarios": [_resumo_dict(c.resumo) for c in res.cenarios],
        })
        return

    table = Table(title="Comparativo de Regimes", box=box.ROUNDED)
    table.add_column("Métrica")
    for c in res.cenarios:
        titulo = c.regime.value + (" ✔" if c.regime is res.melhor else "")
        table.add_column(titulo, justify="right", style="bold green" if c.regime is res.melhor else None)

    linhas = [_linhas_resumo(c.resumo) if c.resumo.viavel else None for c in res.cenarios]
    nomes = [nome for nome, _ in _linhas_resumo(res.cenarios[0].resumo)] if res.cenarios else []
    for idx, nome in enumerate(nomes):
        table.add_row(nome, *[(ln[idx][1] if ln else "INVIÁVEL") for ln in linhas])
    console.print(table)

    if res.melhor is None:
        _painel_inviavel("Nenhum regime viável")
    else:
        melhor = res.cenario_melhor.resumo
        console.print(
            f"[bold green]Regime mais vantajoso:[/] {res.melhor.value} "
            f"(Lucro Líquido Total {_fmt_brl(melhor.total_lucro)})"
        )


@app.command("resumo")
def cmd_resumo(
    itens_path: str = typer.Argument(..., help="Planilha de itens (XLSX ou CSV)"),
    params_path: Optional[str] = typer.Option(None, "--params", "-p", help="JSON de parâmetros"),
    regime: Optional[str] = typer.Option(None, "--regime", "-r", help="Regime a considerar"),
    codigos: Optional[List[str]] = typer.Option(None, "--codigo", "-c", help="Código do item a considerar (repetível)"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
):
    """Resumo executivo, melhor venda x venda mínima e custo da opção híbrida."""
    itens, params = _carregar(itens_path, params_path, regime, codigos)
    cenario = calcular_cenario(itens, params)
    executivo = resumo_executivo(cenario)
    geral = resultado_geral(itens, params)
    opcao = custo_opcao_hibrida(itens, params) if params.regime.is_simples else None

    if as_json:
        _print_json({
            "executivo": executivo,
            "resultado_geral": geral,
            "opcao_hibrida": {
                "viavel": opcao["viavel"],
                "custo_opcao": opcao["custo_opcao"],
                "credito_cliente": opcao["credito_cliente"],
                "itens": opcao["itens"],
            } if opcao else None,
        })
        return

    if not executivo["viavel"]:
        _painel_inviavel()
        return

    table = Table(title=f"Resumo Executivo — {cenario.regime.value}", box=box.ROUNDED)
    table.add_column("Métrica")
    table.add_column("Total (Nota)", justify="right")
    table.add_column("Por Unidade Interna", justify="right")
    table.add_row("Custo Total", _fmt_brl(executivo["custo_total"]), _fmt_brl(executivo["custo_unitario"]))
    table.add_row("Venda Total", _fmt_brl(executivo["venda_total"]), _fmt_brl(executivo["venda_unitaria"]))
    table.add_row("Lucro Líquido", _fmt_brl(executivo["lucro_total"]), _fmt_brl(executivo["lucro_unitario"]))
    console.print(table)

    rotulos = {
        "custo_total": "Custo Total",
        "valor_venda": "Valor de Venda",
        "lucro_bruto": "Lucro Bruto",
        "pagamentos_variaveis": "Pagamentos Variáveis",
        "contribuicao_despesas_fixas": "Contribuição para Despesas Fixas",
        "cfu": "Custo Fixo Rateado por Unidade (CFU)",
        "impostos": "Impostos Totais",
        "margem_contribuicao": "Margem de Contribuição",
        "lucro_liquido": "Lucro Líquido",
    }
    table = Table(title="Resultado Geral", box=box.ROUNDED)
    table.add_column("Métrica")
    table.add_column("Melhor Venda", justify="right")
    table.add_column("Venda Mínima", justify="right")
    for chave, rotulo in rotulos.items():
        table.add_row(rotulo, _fmt_brl(geral["melhor_venda"][chave]), _fmt_brl(geral["venda_minima"][chave]))
    console.print(table)

    if opcao:
        if opcao["viavel"]:
            console.print(Panel(
                f"Custo da Opção Híbrida: {_fmt_brl(opcao['custo_opcao'])}\n"
                f"Crédito de IVA gerado ao cliente: {_fmt_brl(opcao['credito_cliente'])}",
                title="Simples Nacional Híbrido",
            ))
        else:
            _painel_inviavel("Opção Híbrida Inviável")


# -----------------------
# parâmetros
# -----------------------

params_app = typer.Typer(help="Parâmetros de cálculo (JSON).")
app.add_typer(params_app, name="params")


@params_app.command("show")
def cmd_params_show(
    params_path: Optional[str] = typer.Option(None, "--params", "-p", help="JSON de parâmetros"),
    as_json: bool = typer.Option(False, "--json", help="Saída em JSON"),
):
    """Exibe os parâmetros efetivos (com fallback para defaults)."""
    try:
        params = load_parametros_from_json(params_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Erro:[/] {e}")
        raise typer.Exit(code=1)
    efetivos = parametros_to_dict(params)
    defaults = asdict(DEFAULTS)

    if as_json:
        _print_json({**efetivos, "_defaults": defaults})
        return

    table = Table(title="Parâmetros de Cálculo", box=box.ROUNDED)
    table.add_column("Parâmetro")
    table.add_column("Valor Atual", justify="right")
    table.add_column("Valor Padrão", justify="right")
    for chave, valor in efetivos.items():
        if chave in ("despesas_fixas", "despesas_variaveis"):
            continue
        table.add_row(chave, str(valor), str(defaults.get(chave, "")))
    console.print(table)
    for d in params.despesas_fixas:
        console.print(f"[dim]Despesa fixa: {d.nome} = {_fmt_brl(d.valor)}[/dim]")
    for d in params.despesas_variaveis:
        console.print(f"[dim]Despesa variável: {d.nome} = {_fmt_pct(d.percentual)}[/dim]")


# Entry point opcional:
def main():
    app()


if __name__ == "__main__":
    main()
