import re
import unicodedata
from datetime import datetime, timedelta
from typing import Optional

import numpy as np
import pandas as pd

from config import SEM_PEDIDO
from modelos import LucroPorPedido, LucroPorProduto, ResumoLucro

MESES_PT = {
    "janeiro": 1, "fevereiro": 2, "marco": 3, "abril": 4,
    "maio": 5, "junho": 6, "julho": 7, "agosto": 8,
    "setembro": 9, "outubro": 10, "novembro": 11, "dezembro": 12,
}

_DATA_PT = re.compile(r"(\d{1,2})\s+de\s+([^\W\d_]+)\s+de\s+(\d{4})(?:\s+(\d{1,2}):(\d{2}))?", re.IGNORECASE)
_DATA_BR = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})(?:\s+(\d{1,2}):(\d{2}))?")


def _sem_acento(texto: str) -> str:
    return unicodedata.normalize("NFKD", texto).encode("ascii", "ignore").decode("ascii")


def parsear_data_venda(texto) -> Optional[datetime]:
    """
    "15 de novembro de 2024 14:32 hs." | "15/11/2024 14:32" | "2024-11-15" → datetime.
    Qualquer outra coisa → None.
    """
    if not isinstance(texto, str) or not texto.strip():
        return None
    texto = texto.strip()

    try:
        match = _DATA_PT.search(texto)
        if match:
            mes = MESES_PT.get(_sem_acento(match.group(2)).lower())
            if mes is None:
                return None
            hora, minuto = int(match.group(4) or 0), int(match.group(5) or 0)
            return datetime(int(match.group(3)), mes, int(match.group(1)), hora, minuto)

        match = _DATA_BR.match(texto)
        if match:
            dia, mes, ano = int(match.group(1)), int(match.group(2)), int(match.group(3))
            hora, minuto = int(match.group(4) or 0), int(match.group(5) or 0)
            return datetime(ano, mes, dia, hora, minuto)
    except ValueError:
        # 31 de fevereiro, 25:99...
        return None

    if not re.match(r"^\d{4}-\d{2}-\d{2}", texto):
        return None
    data = pd.to_datetime(texto, errors="coerce")
    if pd.isna(data):
        return None
    return data.to_pydatetime().replace(tzinfo=None)


# === AGRUPAMENTOS ===
def _somar_grupos(df, chave):
    """
    Soma as vendas por `chave`. Grupos na ordem em que aparecem (sort=False).
    Devolve o resumo por grupo e as posições das vendas de cada grupo.
    """
    grupos = df.groupby(chave, sort=False)
    resumo = grupos.agg(
        Vendas=("Lucro_Real", "size"),
        SKU=("SKU", "first"),
        Data=("Data", "first"),
        Unidades=("Unidades", "sum"),
        Receita_Produtos=("Receita_Produtos", "sum"),
        Total_Recebido=("Total_Recebido", "sum"),
        Custo_Total=("Custo_Total", "sum"),
        Comissao=("Comissao", "sum"),
        Frete=("Frete", "sum"),
        Lucro_Real=("Lucro_Real", "sum"),
    )
    # margem sobre o total, não média das margens de cada venda
    receita = resumo["Total_Recebido"].where(resumo["Total_Recebido"] > 0)
    resumo["Margem_%"] = (resumo["Lucro_Real"] / receita * 100).fillna(0.0)
    return resumo, grupos.indices


def agrupar_por_produto(lucros) -> list:
    """
    Agrupa por título exato do anúncio.
    Resultado ordenado do mais lucrativo para o menos (empate: produto visto primeiro).
    """
    lucros = list(lucros)
    if not lucros:
        return []

    resumo, posicoes = _somar_grupos(lucros_para_dataframe(lucros), "Produto")
    resumo = resumo.sort_values("Lucro_Real", ascending=False, kind="stable")

    return [
        LucroPorProduto(
            titulo_anuncio=titulo,
            sku=linha["SKU"],
            total_vendas=int(linha["Vendas"]),
            total_unidades=int(linha["Unidades"]),
            receita_total=float(linha["Total_Recebido"]),
            custo_total=float(linha["Custo_Total"]),
            comissao_total=float(linha["Comissao"]),
            frete_total=float(linha["Frete"]),
            lucro_total=float(linha["Lucro_Real"]),
            margem_media=float(linha["Margem_%"]),
            tem_prejuizo=bool(linha["Lucro_Real"] < 0),
            vendas=tuple(lucros[i] for i in posicoes[titulo]),
        )
        for titulo, linha in resumo.iterrows()
    ]


def agrupar_por_pedido(lucros) -> list:
    """
    Agrupa itens pelo nº de venda.
    Pedidos com data reconhecida vêm primeiro (mais recente primeiro);
    os sem data ficam no fim, na ordem em que apareceram.
    """
    lucros = list(lucros)
    if not lucros:
        return []

    df = lucros_para_dataframe(lucros)
    df["Venda"] = df["Venda"].where(df["Venda"] != "", SEM_PEDIDO)
    resumo, posicoes = _somar_grupos(df, "Venda")
    resumo["Data_Venda"] = pd.to_datetime(resumo["Data"].map(parsear_data_venda))
    resumo = resumo.sort_values("Data_Venda", ascending=False, kind="stable", na_position="last")

    return [
        LucroPorPedido(
            numero_venda=numero,
            data_venda=linha["Data"],
            total_unidades=int(linha["Unidades"]),
            receita_produtos=float(linha["Receita_Produtos"]),
            receita_total=float(linha["Total_Recebido"]),
            custo_total=float(linha["Custo_Total"]),
            comissao_total=float(linha["Comissao"]),
            frete_total=float(linha["Frete"]),
            lucro_total=float(linha["Lucro_Real"]),
            margem=float(linha["Margem_%"]),
            tem_prejuizo=bool(linha["Lucro_Real"] < 0),
            vendas=tuple(lucros[i] for i in posicoes[numero]),
        )
        for numero, linha in resumo.iterrows()
    ]


def resumir(lucros, produtos=None) -> ResumoLucro:
    lucros = list(lucros)
    if produtos is None:
        produtos = agrupar_por_produto(lucros)
    if not lucros:
        return ResumoLucro(produtos_com_prejuizo=sum(1 for p in produtos if p.tem_prejuizo))

    df = lucros_para_dataframe(lucros)
    return ResumoLucro(
        total_vendas=len(df),
        total_receita=float(df["Total_Recebido"].sum()),
        total_custo=float(df["Custo_Total"].sum()),
        total_lucro=float(df["Lucro_Real"].sum()),
        vendas_com_prejuizo=int((df["Lucro_Real"] < 0).sum()),
        produtos_com_prejuizo=sum(1 for p in produtos if p.tem_prejuizo),
    )


# === COMPARAÇÃO DE PERÍODOS ===
def periodo_anterior(inicio, fim):
    """Período imediatamente anterior com o mesmo número de dias."""
    dias = (fim - inicio).days + 1
    return inicio - timedelta(days=dias), inicio - timedelta(days=1)


def variacao_percentual(atual: float, anterior: float) -> float:
    if anterior == 0:
        return 0.0
    return (atual - anterior) / abs(anterior) * 100


# === TABELAS ===
def lucros_para_dataframe(lucros) -> pd.DataFrame:
    colunas = [
        "Venda", "Data", "Status", "SKU", "Produto", "Variacao", "Tipo_Anuncio", "Unidades",
        "Preco_Unitario", "Receita_Produtos", "Receita_Envio", "Comissao", "Impostos_Estimados",
        "Frete", "Cancelamentos", "Total_Recebido", "Custo_Unitario", "Custo_Total",
        "Lucro_Real", "Margem_%", "Problemas",
    ]
    df = pd.DataFrame(
        [
            [
                v.numero_venda, v.data_venda, v.status, v.sku, v.titulo_anuncio, v.variacao,
                v.tipo_anuncio, v.unidades, v.preco_venda, v.receita_produtos, v.receita_envio,
                v.comissao_marketplace, v.impostos, v.frete, v.taxas_extras, v.total_recebido,
                v.custo_por_unidade, v.custo_produto, v.lucro_real, v.margem_percentual,
                ", ".join(v.problemas),
            ]
            for v in lucros
        ],
        columns=colunas,
    )
    if df.empty:
        df["Situacao"] = pd.Series(dtype=object)
        return df
    df["Situacao"] = np.where(df["Lucro_Real"] < 0, "🔻 Prejuízo", "✅ Lucro")
    return df


def produtos_para_dataframe(produtos) -> pd.DataFrame:
    colunas = [
        "Produto", "SKU", "Vendas", "Unidades", "Receita_Total", "Custo_Total",
        "Comissao_Total", "Frete_Total", "Lucro_Total", "Margem_Media_%",
    ]
    df = pd.DataFrame(
        [
            [
                p.titulo_anuncio, p.sku, p.total_vendas, p.total_unidades, p.receita_total,
                p.custo_total, p.comissao_total, p.frete_total, p.lucro_total, p.margem_media,
            ]
            for p in produtos
        ],
        columns=colunas,
    )
    if df.empty:
        df["Lucro_por_Unidade"] = pd.Series(dtype=float)
        df["Situacao"] = pd.Series(dtype=object)
        return df
    df["Lucro_por_Unidade"] = (df["Lucro_Total"] / df["Unidades"].replace(0, np.nan)).round(2).fillna(0)
    df["Situacao"] = np.where(df["Lucro_Total"] < 0, "🔻 Prejuízo", "✅ Lucro")
    return df
