from math import isclose

import pytest

from precificacao.config import CBS_RATE, IBS_RATE
from precificacao.domain.models import (
    DespesaVariavel,
    ItemNota,
    Parametros,
    RegimeTributario,
    StatusPreco,
)
from precificacao.usecases.precificar_item import precificar, precificar_itens


def _item(**kw):
    base = dict(
        codigo="P1",
        nome="Produto 1",
        unidade="CX",
        custo_aquisicao=10.0,
        quantidade=5,
        unidades_internas=1,
        credito_pis=0.5,
        credito_cofins=0.3,
        credito_icms=1.0,
    )
    base.update(kw)
    return ItemNota(**base)


def _params(**kw):
    base = dict(
        regime=RegimeTributario.LUCRO_PRESUMIDO,
        margem_lucro=9.5,
        aliquota_irpj=1.2,
        aliquota_csll=1.08,
        aliquota_simples=10.0,
        aliquota_simples_remanescente=4.0,
        percentual_perdas=0.0,
    )
    base.update(kw)
    return Parametros(**base)


def test_cenario_concreto_lucro_presumido():
    p = precificar(_item(), _params(), cfu=2.0)
    assert p.status is StatusPreco.OK
    # termo = (0 + 1,2 + 1,08 + 9,5)/100 + 0,088 + 0,177 = 0,3828 -> divisor 0,6172
    assert isclose(p.custo_base, 12.0)
    assert isclose(p.preco_venda, 12.0 / 0.6172, rel_tol=1e-9)
    assert abs(p.preco_venda - 19.44) < 0.01
    # preço mínimo: divisor 1 - 0,265
    assert isclose(p.preco_minimo, 12.0 / 0.735, rel_tol=1e-9)

    assert isclose(p.cbs_credito, 0.8)
    assert isclose(p.ibs_credito, 1.0)
    assert isclose(p.custo_efetivo, 8.2)
    assert isclose(p.cbs_debito, p.preco_venda * CBS_RATE)
    assert isclose(p.ibs_debito, p.preco_venda * IBS_RATE)
    assert isclose(p.cbs_a_pagar, p.preco_venda * CBS_RATE - 0.8)
    assert isclose(p.ibs_a_pagar, p.preco_venda * IBS_RATE - 1.0)
    assert isclose(p.irpj_a_pagar, p.preco_venda * 0.012)
    assert isclose(p.csll_a_pagar, p.preco_venda * 0.0108)
    assert p.simples_a_pagar == 0.0
    assert isclose(
        p.imposto_a_pagar,
        p.cbs_a_pagar + p.ibs_a_pagar + p.irpj_a_pagar + p.csll_a_pagar,
    )
    assert isclose(p.credito_iva_cliente, p.cbs_debito + p.ibs_debito)
    assert isclose(p.markup_percent, (p.preco_venda - 10.0) / 10.0 * 100)
    assert p.item.cfop == "5102" and p.item.cst == "101"


def test_monotonicidade_margem():
    precos = [
        precificar(_item(), _params(margem_lucro=m), cfu=2.0).preco_venda
        for m in (0.0, 5.0, 9.5, 20.0, 40.0)
    ]
    assert all(a < b for a, b in zip(precos, precos[1:]))


@pytest.mark.parametrize(
    "regime,variaveis,extra",
    [
        # Simples padrão: var + simples + margem
        (RegimeTributario.SIMPLES_NACIONAL, 50.0, dict(aliquota_simples=40.0)),
        # Lucro Presumido: var + irpj + csll + margem + 26,5
        (RegimeTributario.LUCRO_PRESUMIDO, 60.0, dict(aliquota_irpj=1.2, aliquota_csll=1.08)),
        # Híbrido: var + remanescente + margem + 26,5
        (RegimeTributario.SIMPLES_NACIONAL_HIBRIDO, 50.0, dict(aliquota_simples_remanescente=13.5)),
    ],
)
def test_fronteira_de_viabilidade(regime, variaveis, extra):
    base = _params(
        regime=regime,
        despesas_variaveis=(DespesaVariavel("Comissão", variaveis),),
        **extra,
    )
    fixos = {
        RegimeTributario.SIMPLES_NACIONAL: variaveis + 40.0,
        RegimeTributario.LUCRO_PRESUMIDO: variaveis + 2.28 + 26.5,
        RegimeTributario.SIMPLES_NACIONAL_HIBRIDO: variaveis + 13.5 + 26.5,
    }[regime]

    def com_total(total):
        return precificar(_item(), Parametros(**{**base.__dict__, "margem_lucro": total - fixos}), cfu=2.0)

    exato = com_total(100.0)
    assert exato.status is StatusPreco.INVIAVEL
    assert exato.preco_venda == 0.0 and exato.preco_minimo == 0.0

    acima = com_total(100.0001)
    assert acima.status is StatusPreco.INVIAVEL

    abaixo = com_total(99.9999)
    assert abaixo.status is StatusPreco.OK
    assert 0.0 < abaixo.preco_venda < float("inf")


def test_credito_maior_que_debito_nao_gera_imposto_negativo():
    item = _item(credito_pis=5.0, credito_cofins=5.0, credito_icms=20.0)
    p = precificar(item, _params(), cfu=0.0)
    assert p.cbs_debito < 10.0
    assert p.cbs_liquido < 0.0
    assert p.cbs_a_pagar == 0.0
    assert p.ibs_liquido < 0.0
    assert p.ibs_a_pagar == 0.0
    assert isclose(p.cbs_a_pagar, max(0.0, p.preco_venda * CBS_RATE - 10.0))
    # custo efetivo pode ser negativo
    assert isclose(p.custo_efetivo, 10.0 - 30.0)


@pytest.mark.parametrize("unidades", [1, 2.5, 12, 30, 1000])
def test_espelho_por_unidade_interna(unidades):
    p = precificar(_item(unidades_internas=unidades), _params(), cfu=2.0)
    u = p.unidade_interna
    assert isclose(u.preco_venda * unidades, p.preco_venda, rel_tol=1e-12)
    assert isclose(u.preco_minimo * unidades, p.preco_minimo, rel_tol=1e-12)
    assert isclose(u.imposto_a_pagar * unidades, p.imposto_a_pagar, rel_tol=1e-12)
    assert isclose(u.custo_aquisicao * unidades, 10.0, rel_tol=1e-12)


def test_unidades_internas_ausentes_vira_um():
    assert _item(unidades_internas=0).unidades_internas == 1.0
    assert _item(unidades_internas=None).unidades_internas == 1.0


def test_perdas_dobram_custo_base():
    sem = precificar(_item(), _params(), cfu=2.0)
    com = precificar(_item(), _params(percentual_perdas=50.0), cfu=2.0)
    assert isclose(com.custo_base, (10.0 + 2.0) / 0.5)
    assert isclose(com.custo_base, 2 * sem.custo_base)
    assert isclose(com.valor_perdas, 12.0)
    # markup realizado é medido contra o custo original
    assert isclose(com.markup_percent, (com.preco_venda - 10.0) / 10.0 * 100)


@pytest.mark.parametrize("regime", list(RegimeTributario))
def test_perda_total_inviavel(regime):
    p = precificar(_item(), _params(regime=regime, percentual_perdas=100.0, margem_lucro=0.0), cfu=2.0)
    assert p.status is StatusPreco.INVIAVEL
    assert not p.viavel
    # o custo infinito nunca vaza para os campos
    assert p.custo_base == 0.0
    assert p.preco_venda == 0.0
    assert p.imposto_a_pagar == 0.0
    assert p.cbs_credito == 0.0
    assert p.unidade_interna.preco_venda == 0.0


@pytest.mark.parametrize("regime", list(RegimeTributario))
def test_composicao_do_preco_fecha(regime):
    params = _params(
        regime=regime,
        despesas_variaveis=(DespesaVariavel("Comissão", 3.0), DespesaVariavel("Frete", 2.0)),
        percentual_perdas=5.0,
    )
    p = precificar(_item(), params, cfu=2.0)
    partes = [p.valor_impostos, p.valor_despesas_variaveis, p.valor_custo_fixo, p.valor_lucro, p.valor_perdas]
    assert all(v >= 0.0 for v in partes)
    assert isclose(sum(partes) + p.custo_aquisicao, p.preco_venda, rel_tol=1e-9)
    assert isclose(p.valor_despesas_variaveis, p.preco_venda * 0.05)
    assert isclose(p.valor_lucro, p.preco_venda * 0.095)
    assert isclose(p.margem_contribuicao, p.preco_venda - (10.0 + p.valor_despesas_variaveis))


def test_simples_padrao():
    p = precificar(_item(), _params(regime=RegimeTributario.SIMPLES_NACIONAL), cfu=2.0)
    assert isclose(p.preco_venda, 12.0 / (1 - 0.195))
    assert p.cbs_debito == 0.0 and p.ibs_debito == 0.0
    assert p.cbs_a_pagar == 0.0 and p.ibs_a_pagar == 0.0
    assert isclose(p.simples_a_pagar, p.preco_venda * 0.10)
    assert isclose(p.imposto_a_pagar, p.simples_a_pagar)
    assert p.credito_iva_cliente == 0.0
    assert isclose(p.preco_minimo, 12.0 / (1 - 0.10))


def test_simples_hibrido_gera_credito_ao_cliente():
    p = precificar(_item(), _params(regime=RegimeTributario.SIMPLES_NACIONAL_HIBRIDO), cfu=2.0)
    termo = (4.0 + 9.5) / 100 + CBS_RATE + IBS_RATE
    assert isclose(p.preco_venda, 12.0 / (1 - termo))
    assert isclose(p.simples_a_pagar, p.preco_venda * 0.04)
    assert isclose(p.imposto_a_pagar, p.simples_a_pagar + p.cbs_a_pagar + p.ibs_a_pagar)
    assert isclose(p.credito_iva_cliente, p.cbs_debito + p.ibs_debito)
    assert p.irpj_a_pagar == 0.0


def test_custo_zero_markup_zero():
    p = precificar(_item(custo_aquisicao=0.0), _params(), cfu=2.0)
    assert p.status is StatusPreco.OK
    assert p.markup_percent == 0.0
    assert p.preco_venda > 0.0


def test_regime_do_argumento_prevalece():
    params = _params(regime=RegimeTributario.LUCRO_PRESUMIDO)
    p = precificar(_item(), params, cfu=2.0, regime=RegimeTributario.SIMPLES_NACIONAL)
    assert p.regime is RegimeTributario.SIMPLES_NACIONAL
    assert p.cbs_debito == 0.0


def test_precificar_itens_nao_altera_entrada():
    itens = [_item(codigo="A"), _item(codigo="B", custo_aquisicao=20.0)]
    out = precificar_itens(itens, _params(), cfu=1.0)
    assert [p.codigo for p in out] == ["A", "B"]
    assert out[1].preco_venda > out[0].preco_venda
    assert itens[0].custo_aquisicao == 10.0
    # mesma entrada, mesmo resultado
    assert precificar_itens(itens, _params(), cfu=1.0) == out


def test_credito_excedente_de_ibs_abate_cbs():
    # ICMS 8 supera o débito de IBS (~3,44); PIS/COFINS zerados
    item = _item(credito_pis=0.0, credito_cofins=0.0, credito_icms=8.0)
    p = precificar(item, _params(), cfu=2.0)
    assert p.ibs_liquido < 0.0 < p.cbs_liquido
    assert p.cbs_liquido + p.ibs_liquido < 0.0
    # linhas exibidas continuam com piso zero
    assert isclose(p.cbs_a_pagar, p.preco_venda * CBS_RATE)
    assert p.ibs_a_pagar == 0.0
    # o total não cobra CBS: o excedente de IBS a compensa
    assert isclose(p.imposto_a_pagar, p.irpj_a_pagar + p.csll_a_pagar)
    assert isclose(p.imposto_a_pagar, p.preco_venda * (0.012 + 0.0108))
    assert abs(p.imposto_a_pagar - 0.4433) < 1e-3


def test_credito_excedente_parcial():
    item = _item(credito_pis=0.0, credito_cofins=0.0, credito_icms=4.0)
    p = precificar(item, _params(), cfu=2.0)
    assert p.ibs_liquido < 0.0
    assert p.cbs_liquido + p.ibs_liquido > 0.0
    assert isclose(
        p.imposto_a_pagar,
        p.cbs_liquido + p.ibs_liquido + p.irpj_a_pagar + p.csll_a_pagar,
    )
    assert p.imposto_a_pagar < p.cbs_a_pagar + p.ibs_a_pagar + p.irpj_a_pagar + p.csll_a_pagar


@pytest.mark.parametrize("regime", list(RegimeTributario))
def test_lucro_liquido_do_item(regime):
    params = _params(
        regime=regime,
        despesas_variaveis=(DespesaVariavel("Comissão", 3.0),),
    )
    p = precificar(_item(unidades_internas=6), params, cfu=2.0)
    esperado = p.preco_venda - 10.0 - p.imposto_a_pagar - p.preco_venda * 0.03 - 2.0
    assert isclose(p.lucro_liquido, esperado)
    assert isclose(p.unidade_interna.lucro_liquido * 6, p.lucro_liquido)


def test_lucro_liquido_inviavel_zerado():
    p = precificar(_item(), _params(percentual_perdas=100.0), cfu=2.0)
    assert p.lucro_liquido == 0.0
    assert p.unidade_interna.lucro_liquido == 0.0
