"""
Configurações do painel de Lucro Real.
Ajuste aqui nomes de colunas, limites de diagnóstico e estimativas de tarifa.
"""
from dataclasses import dataclass

# === MARKETPLACES ===
MARKETPLACE_PADRAO = "Mercado Livre"
MARKETPLACES = ("Mercado Livre", "Shopee", "Amazon", "Shein")

# Valores do filtro que significam "sem filtro"
MARKETPLACE_TODOS = ("Todos", "All", "Marketplace")

# === PLANILHA DE VENDAS ===
ABA_VENDAS = "Vendas BR"

# Linhas com menos colunas que isso são descartadas (exportação parcial / linhas em branco)
MIN_COLUNAS_VENDA = 20

# campo -> (variações de cabeçalho aceitas, índice fixo se nenhum nome bater)
# O ML já mudou nomes e ordem das colunas entre versões do relatório.
COLUNAS_VENDAS = {
    "numero_venda": (["n.º de venda", "nº de venda", "n.° de venda", "n. de venda",
                      "número de venda", "numero de venda", "pedido"], 0),
    "data_venda": (["data da venda", "data de venda", "data do pedido", "data"], 1),
    "status": (["estado", "status"], 2),
    "unidades": (["unidades", "quantidade", "qtde", "qtd"], 5),
    "receita_produtos": (["receita por produtos (brl)", "receita por produtos"], 6),
    "receita_envio": (["receita por envio (brl)", "receita por envio"], 7),
    "tarifa_venda_impostos": (["tarifa de venda e impostos (brl)", "tarifa de venda e impostos"], 8),
    "tarifas_envio": (["tarifas de envio (brl)", "tarifas de envio", "tarifa de envio"], 9),
    "cancelamentos_reembolsos": (["cancelamentos e reembolsos (brl)", "cancelamentos e reembolsos"], 10),
    "total": (["total (brl)", "total"], 11),
    "sku": (["sku"], 14),
    "titulo_anuncio": (["título do anúncio", "titulo do anuncio", "título", "titulo"], 16),
    "variacao": (["variação", "variacao"], 17),
    "preco_unitario": (["preço unitário de venda do anúncio (brl)",
                        "preco unitario de venda do anuncio (brl)",
                        "preço unitário de venda do anúncio",
                        "preco unitario de venda do anuncio"], 18),
    "custo_por_unidade": (["custo por unidade", "custo do produto", "custo"], 19),
    "tipo_anuncio": (["tipo de anúncio", "tipo de anuncio"], 20),
}

# === PLANILHA DE CUSTOS ===
VARIANTES_TITULO_CUSTO = ["título", "titulo", "título do anúncio", "titulo do anuncio",
                          "produto", "produtos", "descrição", "descricao", "nome"]
VARIANTES_CUSTO = ["custo", "custo por unidade", "custo do produto", "custo_produto",
                   "custo produção", "custo producao", "preço de custo", "preco de custo"]

# Sem cabeçalho reconhecível: pula esse número de linhas e usa colunas 0 (título) e 1 (custo)
LINHAS_CABECALHO_CUSTOS = 2

# === GOOGLE SHEETS ===
SHEET_NAME = "CUSTOS_ML"
GOOGLE_SCOPES = [
    "https://spreadsheets.google.com/feeds",
    "https://www.googleapis.com/auth/drive",
]

# === DIAGNÓSTICO DE PROBLEMAS ===
PROBLEMA_CUSTO_ALTO = "Custo do produto muito alto"
PROBLEMA_COMISSAO_ALTA = "Comissão do marketplace alta"
PROBLEMA_FRETE_CARO = "Frete muito caro"
PROBLEMA_REEMBOLSO = "Cancelamentos/reembolsos"

SEM_PEDIDO = "Sem pedido"


@dataclass(frozen=True)
class PoliticaLucro:
    """
    Constantes de estimativa e diagnóstico.

    O ML entrega comissão e impostos somados em "Tarifa de venda e impostos".
    A divisão 70/30 é uma ESTIMATIVA sem base oficial.
    """
    parcela_imposto: float = 0.3
    limite_comissao: float = 0.2   # fração da receita de produtos
    limite_frete: float = 0.3      # fração da receita de produtos
    comissao_padrao: float = 0.12  # usada na tabela simplificada de custos
    frete_padrao: float = 15.00

    @property
    def parcela_comissao(self) -> float:
        """O que sobra da tarifa depois dos impostos estimados."""
        return 1 - self.parcela_imposto


POLITICA_PADRAO = PoliticaLucro()
