import json
from math import isclose
from pathlib import Path

import pytest
from typer.testing import CliRunner

from precificacao.adapters.cli import app

runner = CliRunner()

CSV = (
    "codigo;nome;unidade;custo;quantidade;pis;cofins;icms\n"
    "1;CAFE 30X300G;CX;150,00;2;2,48;11,40;18,00\n"
    "2;Detergente;UN;2,50;48;0;0;0,30\n"
)


@pytest.fixture
def planilha(tmp_path: Path) -> Path:
    path = tmp_path / "nota.csv"
    path.write_text(CSV, encoding="utf-8")
    return path


@pytest.fixture
def params_json(tmp_path: Path) -> Path:
    path = tmp_path / "params.json"
    path.write_text(json.dumps({
        "margem_lucro": "9,5",
        "despesas_fixas": [{"nome": "Aluguel", "valor": 5000}],
        "folha_pagamento": 10000,
        "estoque_total_unidades": 5000,
        "aliquota_simples": 10,
        "aliquota_simples_remanescente": 4,
    }), encoding="utf-8")
    return path


def test_cli_precificar_json(planilha: Path, params_json: Path):
    result = runner.invoke(app, ["precificar", str(planilha), "-p", str(params_json), "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["regime"] == "Lucro Presumido"
    assert isclose(data["total_despesas_fixas"], 15000.0)
    assert isclose(data["cfu"], 3.0)
    assert [i["codigo"] for i in data["itens"]] == ["1", "2"]
    assert data["itens"][0]["status"] == "OK"
    resumo = data["resumo"]
    assert resumo["viavel"] is True
    assert resumo["status"] == "OK"
    assert isclose(
        resumo["total_venda"],
        sum(i["preco_venda"] * i["quantidade"] for i in data["itens"]),
    )


def test_cli_precificar_regime_override(planilha: Path):
    result = runner.invoke(app, ["precificar", str(planilha), "-r", "simples", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["regime"] == "Simples Nacional"
    assert all(i["cbs_debito"] == 0.0 for i in data["itens"])


def test_cli_precificar_tabela(planilha: Path):
    result = runner.invoke(app, ["precificar", str(planilha)])
    assert result.exit_code == 0, result.output
    assert "Parâmetros da Simulação" in result.stdout
    assert "Resumo Global" in result.stdout


def test_cli_precificar_inviavel(planilha: Path, tmp_path: Path):
    params = tmp_path / "inviavel.json"
    params.write_text(json.dumps({"margem_lucro": 90}), encoding="utf-8")
    result = runner.invoke(app, ["precificar", str(planilha), "-p", str(params), "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["resumo"]["viavel"] is False
    assert data["resumo"]["status"] == "PREÇO INVIÁVEL"
    assert all(i["preco_venda"] == 0.0 for i in data["itens"])


def test_cli_comparar_json(planilha: Path, params_json: Path):
    result = runner.invoke(app, ["comparar", str(planilha), "-p", str(params_json), "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    regimes = [c["regime"] for c in data["cenarios"]]
    assert regimes == ["Simples Nacional", "Lucro Presumido", "Lucro Real"]
    viaveis = [c for c in data["cenarios"] if c["viavel"]]
    melhor = max(viaveis, key=lambda c: c["total_lucro"])
    assert data["melhor"] == melhor["regime"]


def test_cli_comparar_venda_minima(planilha: Path, params_json: Path):
    result = runner.invoke(
        app, ["comparar", str(planilha), "-p", str(params_json), "--venda-minima", "--json"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert all(c["margem_lucro_alvo"] == 0.0 for c in data["cenarios"])


def test_cli_resumo_simples_inclui_opcao_hibrida(planilha: Path, params_json: Path):
    result = runner.invoke(
        app, ["resumo", str(planilha), "-p", str(params_json), "-r", "simples", "--json"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["executivo"]["regime"] == "Simples Nacional"
    assert data["executivo"]["unidades_internas"] == 2 * 30 + 48
    assert data["resultado_geral"]["venda_minima"]["valor_venda"] < data["resultado_geral"]["melhor_venda"]["valor_venda"]
    assert data["opcao_hibrida"]["viavel"] is True
    assert data["opcao_hibrida"]["credito_cliente"] > 0


def test_cli_resumo_lucro_presumido_sem_opcao_hibrida(planilha: Path):
    result = runner.invoke(app, ["resumo", str(planilha), "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["opcao_hibrida"] is None


def test_cli_params_show(params_json: Path):
    result = runner.invoke(app, ["params", "show", "-p", str(params_json), "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["margem_lucro"] == 9.5
    assert data["regime"] == "Lucro Presumido"
    assert data["despesas_fixas"] == [{"nome": "Aluguel", "valor": 5000.0}]
    assert "_defaults" in data
    assert data["_defaults"]["margem_lucro"] == 9.5


def test_cli_params_show_defaults():
    result = runner.invoke(app, ["params", "show", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["aliquota_simples"] == 10.0


def test_cli_arquivo_inexistente(tmp_path: Path):
    result = runner.invoke(app, ["precificar", str(tmp_path / "nada.csv")])
    assert result.exit_code == 1
    assert "Erro" in result.stdout


def test_cli_regime_invalido(planilha: Path):
    result = runner.invoke(app, ["precificar", str(planilha), "-r", "MEI", "--json"])
    assert result.exit_code == 1


def test_cli_precificar_so_itens_selecionados(planilha: Path, params_json: Path):
    result = runner.invoke(
        app, ["precificar", str(planilha), "-p", str(params_json), "--codigo", "2", "--json"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert [i["codigo"] for i in data["itens"]] == ["2"]
    assert data["resumo"]["quantidade_itens"] == 1
    item = data["itens"][0]
    assert isclose(
        item["lucro_liquido"],
        item["preco_venda"] - item["custo_aquisicao"] - item["imposto_a_pagar"] - item["custo_fixo"],
    )


def test_cli_comparar_e_resumo_com_selecao(planilha: Path, params_json: Path):
    result = runner.invoke(
        app, ["comparar", str(planilha), "-p", str(params_json), "-c", "1", "-c", "2", "--json"]
    )
    assert result.exit_code == 0, result.output
    assert all(c["quantidade_itens"] == 2 for c in json.loads(result.stdout)["cenarios"])

    result = runner.invoke(
        app, ["resumo", str(planilha), "-p", str(params_json), "-c", "1", "--json"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["executivo"]["unidades_internas"] == 2 * 30


def test_cli_codigo_inexistente(planilha: Path):
    result = runner.invoke(app, ["comparar", str(planilha), "--codigo", "999"])
    assert result.exit_code == 1
    assert "999" in result.stdout
