import pytest

from lucro_utils import calcular_lucro
from modelos import VendaML

CABECALHO_ML = [
    "N.º de venda", "Data da venda", "Estado", "Descrição do status", "Pacote de diversos produtos",
    "Unidades", "Receita por produtos (BRL)", "Receita por envio (BRL)",
    "Tarifa de venda e impostos (BRL)", "Tarifas de envio (BRL)", "Cancelamentos e reembolsos (BRL)",
    "Total (BRL)", "Mês de faturamento das suas tarifas", "Venda por publicidade", "SKU",
    "# de anúncio", "Título do anúncio", "Variação", "Preço unitário de venda do anúncio (BRL)",
    "Custo por unidade", "Tipo de anúncio",
]

POSICOES = {
    "numero_venda": 0, "data_venda": 1, "status": 2, "unidades": 5, "receita_produtos": 6,
    "receita_envio": 7, "tarifa_venda_impostos": 8, "tarifas_envio": 9,
    "cancelamentos_reembolsos": 10, "total": 11, "sku": 14, "titulo_anuncio": 16,
    "variacao": 17, "preco_unitario": 18, "custo_por_unidade": 19, "tipo_anuncio": 20,
}


def linha_venda(**campos):
    linha = [""] * len(CABECALHO_ML)
    for campo, valor in campos.items():
        linha[POSICOES[campo]] = valor
    return linha


def para_csv(linhas):
    def campo(valor):
        return '"' + str(valor).replace('"', '""') + '"'
    return "\n".join(",".join(campo(v) for v in linha) for linha in linhas)


def venda(**campos):
    base = dict(numero_venda="2000001", titulo_anuncio="Creatina 300g Premium", unidades=1)
    base.update(campos)
    return VendaML(**base)


def lucro(custos=None, **campos):
    return calcular_lucro(venda(**campos), custos or {})


@pytest.fixture
def csv_vendas():
    return para_csv([
        CABECALHO_ML,
        linha_venda(
            numero_venda="2000009741628937", data_venda="15 de novembro de 2024 14:32 hs.",
            status="Entregue", unidades="2", receita_produtos="160,00", receita_envio="10,00",
            tarifa_venda_impostos="-20,00", tarifas_envio="-8,00", cancelamentos_reembolsos="",
            total="142,00", sku="3888", titulo_anuncio="Creatina 300g Premium",
            variacao="Sabor: Natural", preco_unitario="80,00", tipo_anuncio="Premium",
        ),
        linha_venda(
            numero_venda="2000009741628938", data_venda="16 de novembro de 2024 09:10 hs.",
            status="Cancelada pelo comprador", unidades="1", receita_produtos="R$ 1.299,90",
            tarifa_venda_impostos="-R$ 220,98", tarifas_envio="-25,50",
            cancelamentos_reembolsos="-1.299,90", total="-246,48", sku="4001",
            titulo_anuncio="Whey Protein 900g, Chocolate", preco_unitario="1.299,90",
            tipo_anuncio="Clássico",
        ),
    ])
