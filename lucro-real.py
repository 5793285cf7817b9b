# -*- coding: utf-8 -*-
import logging
from datetime import datetime
from io import BytesIO

import streamlit as st

from agregacao import (
    agrupar_por_pedido,
    agrupar_por_produto,
    lucros_para_dataframe,
    parsear_data_venda,
    periodo_anterior,
    produtos_para_dataframe,
    resumir,
    variacao_percentual,
)
from config import MARKETPLACES, POLITICA_PADRAO, PoliticaLucro
from filtros import filtrar_por_busca, filtrar_por_marketplace, filtrar_por_periodo, filtrar_por_status
from lucro_utils import calcular_lucros
from planilha_utils import ErroPlanilha, formatar_moeda, ler_arquivo_vendas
from utils.custos import (
    carregar_custos_google,
    carregar_produtos_custo,
    conectar_google,
    custos_para_dataframe,
    ler_arquivo_custos,
)
from utils.relatorio import gerar_relatorio_excel

logging.basicConfig(level=logging.INFO)

st.set_page_config(page_title="💰 Lucro Real Marketplace", layout="wide")
st.title("💰 Lucro Real por Venda e Produto")

# === CONFIGURAÇÕES ===
st.sidebar.header("⚙️ Configurações")

marketplace = st.sidebar.selectbox("Marketplace", ["Todos", *MARKETPLACES])

parcela_imposto = st.sidebar.number_input(
    "Parcela de impostos na tarifa (%)",
    min_value=0.0,
    max_value=100.0,
    value=POLITICA_PADRAO.parcela_imposto * 100,
    step=5.0,
    help="O ML junta comissão e impostos em 'Tarifa de venda e impostos'. Esta é a fração estimada como imposto (estimativa, não dado oficial)."
)
limite_comissao = st.sidebar.number_input(
    "Comissão alta acima de (% da receita)",
    min_value=0.0,
    max_value=100.0,
    value=POLITICA_PADRAO.limite_comissao * 100,
    step=1.0,
    help="Em vendas com prejuízo, marca 'Comissão do marketplace alta' quando a tarifa passa deste percentual da receita por produtos."
)
limite_frete = st.sidebar.number_input(
    "Frete caro acima de (% da receita)",
    min_value=0.0,
    max_value=100.0,
    value=POLITICA_PADRAO.limite_frete * 100,
    step=1.0,
    help="Em vendas com prejuízo, marca 'Frete muito caro' quando as tarifas de envio passam deste percentual da receita por produtos."
)

politica = PoliticaLucro(
    parcela_imposto=parcela_imposto / 100,
    limite_comissao=limite_comissao / 100,
    limite_frete=limite_frete / 100,
)
st.sidebar.caption(
    f"Tarifa estimada: {politica.parcela_comissao:.0%} comissão, {politica.parcela_imposto:.0%} impostos."
)

st.sidebar.markdown(
    """
💡 **Como o lucro é calculado:**

> **Total recebido = Receita produtos + Receita envio − Tarifas − Frete − Cancelamentos**
>
> **Lucro real = Total recebido − Custo unitário × Unidades**
"""
)


def _arquivo(nome, dados):
    buffer = BytesIO(dados)
    buffer.name = nome
    return buffer


@st.cache_data(ttl=600)
def _custos_google():
    client = conectar_google(st.secrets["gcp_service_account"])
    return carregar_custos_google(client)


@st.cache_data
def processar(nome_vendas, dados_vendas, custos_itens, politica):
    """Vendas e custos entram juntos: o cache nunca mistura um arquivo novo com custos antigos."""
    vendas = ler_arquivo_vendas(_arquivo(nome_vendas, dados_vendas))
    return calcular_lucros(vendas, dict(custos_itens), politica)


# === CUSTOS ===
st.subheader("💰 Custos de Produtos")
origem_custos = st.radio("Origem dos custos", ["Arquivo", "Google Sheets"], horizontal=True)

custos = {}
if origem_custos == "Google Sheets":
    try:
        custos = _custos_google()
        st.success(f"📡 {len(custos)} custos carregados do Google Sheets.")
    except Exception as e:
        st.error(f"❌ Erro ao carregar custos do Google Sheets: {e}")
else:
    arquivo_custos = st.file_uploader("📤 Envie a planilha de custos (.csv ou .xlsx)", type=["csv", "xlsx"])
    if arquivo_custos:
        try:
            custos = ler_arquivo_custos(arquivo_custos)
            st.success(f"✅ {len(custos)} custos carregados de {arquivo_custos.name}.")
        except ErroPlanilha as e:
            st.error(f"❌ {e}")

if not custos:
    st.warning("⚠️ Nenhum custo carregado. Vendas sem 'Custo por unidade' no relatório ficarão com custo 0.")

# === VENDAS ===
st.markdown("---")
st.subheader("📦 Upload de Vendas")
arquivo_vendas = st.file_uploader("📤 Envie o relatório de vendas (.xlsx ou .csv)", type=["xlsx", "csv"])

if not arquivo_vendas:
    st.info("Envie o relatório de vendas para ver o lucro real.")
    st.stop()

try:
    lucros = processar(arquivo_vendas.name, arquivo_vendas.getvalue(), tuple(custos.items()), politica)
except ErroPlanilha as e:
    st.error(f"❌ {e}")
    st.stop()

if not lucros:
    st.warning("⚠️ Nenhuma venda válida encontrada no arquivo.")

lucros = filtrar_por_marketplace(lucros, marketplace)

# === PERÍODO ===
datas = [d for d in (parsear_data_venda(l.data_venda) for l in lucros) if d is not None]
lucros_periodo = lucros
lucros_anteriores = []
if datas:
    data_min, data_max = min(datas).date(), max(datas).date()
    periodo = st.date_input("📅 Período", value=(data_min, data_max))
    if isinstance(periodo, (list, tuple)) and len(periodo) == 2:
        inicio, fim = periodo
        lucros_periodo = filtrar_por_periodo(lucros, inicio, fim)
        lucros_anteriores = filtrar_por_periodo(lucros, *periodo_anterior(inicio, fim))
        if not lucros_periodo:
            st.info("Sem vendas no período selecionado, mostrando todas as vendas do arquivo.")
            lucros_periodo = lucros

produtos = agrupar_por_produto(lucros_periodo)
pedidos = agrupar_por_pedido(lucros_periodo)
resumo = resumir(lucros_periodo, produtos)
lucro_anterior = sum(l.lucro_real for l in lucros_anteriores)
receita_anterior = sum(l.total_recebido for l in lucros_anteriores)

# === MÉTRICAS ===
col1, col2, col3, col4, col5, col6 = st.columns(6)
col1.metric("Vendas", resumo.total_vendas)
col2.metric("Total Recebido", formatar_moeda(resumo.total_receita),
            f"{variacao_percentual(resumo.total_receita, receita_anterior):.1f}%")
col3.metric("Custo dos Produtos", formatar_moeda(resumo.total_custo))
col4.metric("Lucro Real", formatar_moeda(resumo.total_lucro),
            f"{variacao_percentual(resumo.total_lucro, lucro_anterior):.1f}%")
col5.metric("Vendas com Prejuízo", resumo.vendas_com_prejuizo)
col6.metric("🔻 Produtos com Prejuízo", resumo.produtos_com_prejuizo)

# === FILTROS ===
st.markdown("---")
col_busca, col_status = st.columns([3, 2])
busca = col_busca.text_input("🔎 Buscar produto, SKU ou nº de venda")
status = col_status.radio("Mostrar", ["todos", "lucro", "prejuizo"], horizontal=True,
                          format_func={"todos": "Todos", "lucro": "✅ Lucro", "prejuizo": "🔻 Prejuízo"}.get)

aba_produtos, aba_pedidos, aba_vendas, aba_custos = st.tabs(["📊 Por produto", "🧾 Por pedido", "📋 Vendas", "💰 Custos"])

with aba_produtos:
    produtos_vis = filtrar_por_status(filtrar_por_busca(produtos, busca), status)
    st.dataframe(produtos_para_dataframe(produtos_vis), use_container_width=True)

    criticos = [p for p in produtos_vis if p.tem_prejuizo]
    if criticos:
        pior = criticos[-1]
        st.warning(
            f"🚨 Produto com maior prejuízo: **{pior.titulo_anuncio}** "
            f"(SKU: {pior.sku} | {pior.total_vendas} vendas | {formatar_moeda(pior.lucro_total)})"
        )
        problemas = sorted({p for v in pior.vendas for p in v.problemas})
        if problemas:
            st.markdown("**Possíveis causas:** " + " · ".join(problemas))

with aba_pedidos:
    pedidos_vis = filtrar_por_status(filtrar_por_busca(pedidos, busca), status)
    st.dataframe(
        [
            {
                "Venda": p.numero_venda,
                "Data": p.data_venda,
                "Itens": len(p.vendas),
                "Unidades": p.total_unidades,
                "Total Recebido": p.receita_total,
                "Custo": p.custo_total,
                "Comissão": p.comissao_total,
                "Frete": p.frete_total,
                "Lucro": p.lucro_total,
                "Margem %": round(p.margem, 2),
            }
            for p in pedidos_vis
        ],
        use_container_width=True,
    )

with aba_vendas:
    vendas_vis = filtrar_por_status(filtrar_por_busca(lucros_periodo, busca), status)
    st.dataframe(lucros_para_dataframe(vendas_vis), use_container_width=True)
    sem_custo = sum(1 for l in vendas_vis if not l.custo_encontrado)
    if sem_custo:
        st.caption(f"⚠️ {sem_custo} vendas sem custo encontrado: a margem delas está superestimada.")

with aba_custos:
    st.dataframe(custos_para_dataframe(custos), use_container_width=True)
    produtos_custo = carregar_produtos_custo(custos, politica)
    if produtos_custo:
        st.caption("Comissão e frete padrão usados na simulação rápida:")
        st.dataframe(
            [{"Produto": p.titulo, "Custo": p.custo, "Comissão (12%)": p.comissao, "Frete": p.frete}
             for p in produtos_custo],
            use_container_width=True,
        )

# === EXPORTAÇÃO ===
st.markdown("---")
st.download_button(
    label="⬇️ Baixar Relatório de Lucro Real (Excel)",
    data=gerar_relatorio_excel(lucros_periodo, produtos),
    file_name=f"Lucro_Real_{datetime.now().strftime('%d-%m-%Y_%H-%M-%S')}.xlsx",
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)
