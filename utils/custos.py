# utils/custos.py
import logging

import gspread
import pandas as pd
from google.oauth2.service_account import Credentials

from config import (
    GOOGLE_SCOPES,
    LINHAS_CABECALHO_CUSTOS,
    POLITICA_PADRAO,
    SHEET_NAME,
    VARIANTES_CUSTO,
    VARIANTES_TITULO_CUSTO,
)
from modelos import ProdutoCusto
from planilha_utils import (
    ErroPlanilha,
    ler_linhas_arquivo,
    normalizar_cabecalho,
    normalizar_linhas,
    parsear_moeda,
    texto_celula,
)

logger = logging.getLogger(__name__)


def _localizar_colunas_custo(linhas, limite=30):
    """
    Procura a linha de cabeçalho com uma coluna de título e uma de custo.
    Devolve (primeira linha de dados, índice do título, índice do custo).
    """
    titulos = {normalizar_cabecalho(v) for v in VARIANTES_TITULO_CUSTO}
    custos = {normalizar_cabecalho(v) for v in VARIANTES_CUSTO}

    for i, linha in enumerate(linhas[:limite]):
        nomes = [normalizar_cabecalho(c) for c in linha]
        idx_titulo = next((j for j, n in enumerate(nomes) if n in titulos), None)
        idx_custo = next(
            (j for j, n in enumerate(nomes) if j != idx_titulo and (n in custos or n.startswith("custo"))),
            None,
        )
        if idx_titulo is not None and idx_custo is not None:
            return i + 1, idx_titulo, idx_custo

    logger.warning(
        f"Cabeçalho de custos não encontrado, pulando {LINHAS_CABECALHO_CUSTOS} linhas (título=col 0, custo=col 1)"
    )
    return LINHAS_CABECALHO_CUSTOS, 0, 1


def parsear_custos(payload) -> dict:
    """
    Tabela de custos (CSV ou linhas de planilha) → {título: custo unitário}.
    ✔ Custo zero ou vazio é ignorado (não pode bloquear a busca por título).
    ✔ Título repetido: vale o último valor.
    """
    linhas = normalizar_linhas(payload)
    if not linhas:
        return {}

    inicio, idx_titulo, idx_custo = _localizar_colunas_custo(linhas)
    custos = {}
    for linha in linhas[inicio:]:
        if len(linha) <= max(idx_titulo, idx_custo):
            continue
        titulo = texto_celula(linha[idx_titulo])
        custo = parsear_moeda(linha[idx_custo])
        if titulo and custo > 0:
            custos[titulo] = custo

    logger.info(f"{len(custos)} custos de produtos carregados")
    return custos


def carregar_produtos_custo(payload, politica=POLITICA_PADRAO) -> list:
    """Versão simplificada: custo + comissão padrão (12% do custo) + frete padrão."""
    custos = payload if isinstance(payload, dict) else parsear_custos(payload)
    return [
        ProdutoCusto(
            titulo=titulo,
            custo=custo,
            comissao=custo * politica.comissao_padrao,
            frete=politica.frete_padrao,
        )
        for titulo, custo in custos.items()
    ]


def ler_arquivo_custos(arquivo) -> dict:
    """Lê o arquivo de custos enviado (.csv ou .xlsx)."""
    return parsear_custos(ler_linhas_arquivo(arquivo))


def conectar_google(info):
    """Autentica com a conta de serviço (bloco gcp_service_account dos secrets)."""
    info = dict(info)
    # Corrige quebras de linha na private_key
    if "private_key" in info:
        info["private_key"] = info["private_key"].replace("\\n", "\n")
    creds = Credentials.from_service_account_info(info, scopes=GOOGLE_SCOPES)
    return gspread.authorize(creds)


def carregar_custos_google(client, sheet_name=SHEET_NAME) -> dict:
    """Lê custos diretamente do Google Sheets (somente leitura)."""
    try:
        sheet = client.open(sheet_name).sheet1
        dados = sheet.get_all_values()  # tudo como texto, formato pt-BR
    except Exception as e:
        raise ErroPlanilha(f"Erro ao carregar custos do Google Sheets: {e}") from e
    return parsear_custos(dados)


def custos_para_dataframe(custos: dict) -> pd.DataFrame:
    return pd.DataFrame({"Produto": list(custos.keys()), "Custo_Produto": list(custos.values())})
