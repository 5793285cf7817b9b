from datetime import date

import pytest

from agregacao import agrupar_por_pedido, agrupar_por_produto
from filtros import filtrar_por_busca, filtrar_por_marketplace, filtrar_por_periodo, filtrar_por_status
from tests.conftest import lucro


@pytest.fixture
def lucros():
    return [
        lucro(numero_venda="2000101", titulo_anuncio="Creatina 300g", sku="3888",
              data_venda="10 de novembro de 2024 10:00 hs.", receita_produtos=100.0),
        lucro(numero_venda="2000102", titulo_anuncio="Whey Protein", sku="4001",
              data_venda="20/11/2024", receita_produtos=10.0, custo_por_unidade=50.0),
        lucro(numero_venda="2000103", titulo_anuncio="Tênis Corrida", sku="7777",
              data_venda="30/11/2024 23:59", receita_produtos=80.0, marketplace="Shopee"),
        lucro(numero_venda="2000104", titulo_anuncio="BCAA", data_venda="", receita_produtos=20.0),
    ]


# === MARKETPLACE ===
@pytest.mark.parametrize("valor", ["Todos", "All", "Marketplace"])
def test_sem_filtro(lucros, valor):
    assert filtrar_por_marketplace(lucros, valor) == lucros


def test_marketplace_desconhecido_devolve_tudo(lucros):
    resultado = filtrar_por_marketplace(lucros, "tag-desconhecida")
    assert resultado == lucros
    assert all(a is b for a, b in zip(resultado, lucros))


def test_marketplace_conhecido(lucros):
    assert [l.numero_venda for l in filtrar_por_marketplace(lucros, "Shopee")] == ["2000103"]
    assert len(filtrar_por_marketplace(lucros, "Mercado Livre")) == 3


def test_marketplace_sem_dados_fica_vazio(lucros):
    assert filtrar_por_marketplace(lucros, "Amazon") == []


def test_agregados_contam_como_mercado_livre(lucros):
    produtos = agrupar_por_produto(lucros)
    assert filtrar_por_marketplace(produtos, "Mercado Livre") == produtos


# === BUSCA ===
def test_busca_por_titulo_sku_e_numero(lucros):
    assert [l.sku for l in filtrar_por_busca(lucros, "whey")] == ["4001"]
    assert [l.titulo_anuncio for l in filtrar_por_busca(lucros, "7777")] == ["Tênis Corrida"]
    assert [l.sku for l in filtrar_por_busca(lucros, "2000101")] == ["3888"]
    assert filtrar_por_busca(lucros, "   ") == lucros


def test_busca_em_pedidos(lucros):
    pedidos = agrupar_por_pedido(lucros)
    assert [p.numero_venda for p in filtrar_por_busca(pedidos, "2000104")] == ["2000104"]


# === STATUS ===
def test_filtrar_por_status(lucros):
    assert [l.numero_venda for l in filtrar_por_status(lucros, "prejuizo")] == ["2000102"]
    assert len(filtrar_por_status(lucros, "lucro")) == 3
    assert filtrar_por_status(lucros, "todos") == lucros


# === PERÍODO ===
def test_periodo_inclui_os_dois_extremos(lucros):
    resultado = filtrar_por_periodo(lucros, date(2024, 11, 10), date(2024, 11, 30))
    assert [l.numero_venda for l in resultado] == ["2000101", "2000102", "2000103"]


def test_periodo_ignora_sem_data(lucros):
    resultado = filtrar_por_periodo(lucros, date(2024, 11, 11), date(2024, 11, 20))
    assert [l.numero_venda for l in resultado] == ["2000102"]
