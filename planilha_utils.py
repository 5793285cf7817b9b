# -*- coding: utf-8 -*-
import logging
import numbers
import re
from pathlib import Path

import pandas as pd

from config import ABA_VENDAS, COLUNAS_VENDAS, MARKETPLACE_PADRAO, MIN_COLUNAS_VENDA
from modelos import VendaML

logger = logging.getLogger(__name__)

_NUMERO = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)")
_INTEIRO = re.compile(r"^[-+]?\d+")
_MILHAR = re.compile(r"^[-+]?\d{1,3}(\.\d{3})+$")


class ErroPlanilha(Exception):
    """Arquivo ou conteúdo que não dá para transformar em linhas."""


# === VALORES ===
def parsear_moeda(valor) -> float:
    """
    Converte valor monetário pt-BR em float.
    Ex: "R$ 1.234,56" → 1234.56 | "-15,30" → -15.3 | "" → 0.0
    Células numéricas (Excel) já chegam como número e não passam pela limpeza.
    """
    if valor is None or isinstance(valor, bool):
        return 0.0
    if isinstance(valor, numbers.Real):
        if pd.isna(valor) or valor in (float("inf"), float("-inf")):
            return 0.0
        return float(valor)

    texto = str(valor).strip()
    if not texto:
        return 0.0
    texto = re.sub(r"\s", "", texto.replace("R$", ""))
    if "," in texto or _MILHAR.match(texto):
        # Ex: 1.234,56 → 1234.56 | 162,49 → 162.49 | 1.234 → 1234
        texto = texto.replace(".", "").replace(",", ".", 1)
    # Ex: 162.49 → 162.49 (planilha de custos com ponto decimal, mantém)

    match = _NUMERO.match(texto)
    return float(match.group(0)) if match else 0.0


def formatar_moeda(valor: float) -> str:
    """1234.5 → "R$ 1.234,50" """
    valor = round(float(valor), 2)
    texto = f"{abs(valor):,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return f"-R$ {texto}" if valor < 0 else f"R$ {texto}"


def parsear_inteiro(valor) -> int:
    if valor is None or isinstance(valor, bool):
        return 0
    if isinstance(valor, numbers.Real):
        if pd.isna(valor) or valor in (float("inf"), float("-inf")):
            return 0
        return max(int(valor), 0)
    match = _INTEIRO.match(str(valor).strip())
    return max(int(match.group(0)), 0) if match else 0


def texto_celula(valor) -> str:
    if valor is None:
        return ""
    # IDs longos lidos do Excel como float (2.000009741628937e+15)
    if isinstance(valor, float) and valor.is_integer():
        return str(int(valor))
    return str(valor).strip()


# === LINHAS ===
def dividir_linhas_csv(texto: str) -> list:
    """
    Divide CSV em linhas e campos numa única varredura.

    Campos entre aspas podem conter vírgulas e quebras de linha, por isso
    não dá para simplesmente fazer split('\\n') antes. "" dentro de aspas é aspa literal.
    """
    linhas = []
    campos = []
    atual = []
    dentro_aspas = False

    def fechar_linha():
        campos.append("".join(atual))
        atual.clear()
        # linha em branco
        if not (len(campos) == 1 and not campos[0].strip()):
            linhas.append(list(campos))
        campos.clear()

    i, n = 0, len(texto)
    while i < n:
        char = texto[i]
        if char == '"':
            if dentro_aspas and i + 1 < n and texto[i + 1] == '"':
                atual.append('"')
                i += 2
                continue
            dentro_aspas = not dentro_aspas
        elif char == "," and not dentro_aspas:
            campos.append("".join(atual))
            atual.clear()
        elif char in "\r\n" and not dentro_aspas:
            if char == "\r" and i + 1 < n and texto[i + 1] == "\n":
                i += 1
            fechar_linha()
        else:
            atual.append(char)
        i += 1

    if atual or campos:
        fechar_linha()
    return linhas


def _celula_vazia(celula) -> bool:
    if celula is None:
        return True
    if isinstance(celula, str):
        return False
    try:
        return bool(pd.isna(celula))
    except (TypeError, ValueError):
        return False


def normalizar_linhas(payload) -> list:
    """
    Aceita texto CSV ou matriz de células (planilha / Google Sheets)
    e devolve sempre lista de linhas. Células vazias viram "".
    """
    if payload is None:
        return []
    if isinstance(payload, bytes):
        payload = _decodificar(payload)
    if isinstance(payload, str):
        return dividir_linhas_csv(payload)
    if isinstance(payload, pd.DataFrame):
        payload = [list(payload.columns)] + payload.values.tolist()
    if not isinstance(payload, (list, tuple)):
        raise ErroPlanilha(f"Formato de dados não suportado: {type(payload).__name__}")

    linhas = []
    for linha in payload:
        if linha is None:
            linha = []
        elif isinstance(linha, str):
            linha = [linha]
        celulas = []
        for celula in linha:
            if _celula_vazia(celula):
                celulas.append("")
            elif isinstance(celula, (str, numbers.Real)):
                celulas.append(celula)
            else:
                celulas.append(str(celula))
        linhas.append(celulas)
    return linhas


# === CABEÇALHO ===
def normalizar_cabecalho(nome) -> str:
    return re.sub(r"\s+", " ", texto_celula(nome).lower())


def mapear_colunas(cabecalho, tabela=COLUNAS_VENDAS) -> dict:
    """Resolve campo → índice pelo nome da coluna; sem nome conhecido usa a posição fixa."""
    indices = {}
    for i, nome in enumerate(cabecalho):
        chave = normalizar_cabecalho(nome)
        if chave:
            # "Estado" aparece duas vezes no relatório do ML (status e endereço): vale a primeira
            indices.setdefault(chave, i)

    mapa = {}
    por_posicao = []
    for campo, (variantes, posicao) in tabela.items():
        idx = next((indices[v] for v in map(normalizar_cabecalho, variantes) if v in indices), None)
        if idx is None:
            idx = posicao
            por_posicao.append(campo)
        mapa[campo] = idx

    if por_posicao:
        logger.info(f"Colunas resolvidas por posição fixa: {', '.join(por_posicao)}")
    return mapa


def localizar_cabecalho(linhas, tabela=COLUNAS_VENDAS, minimo=2, limite=30) -> int:
    """
    Índice da primeira linha que parece cabeçalho (≥ `minimo` nomes conhecidos).
    O .xlsx do ML traz linhas de título/período acima do cabeçalho real.
    """
    nomes = {normalizar_cabecalho(v) for variantes, _ in tabela.values() for v in variantes}
    for i, linha in enumerate(linhas[:limite]):
        encontrados = sum(1 for c in linha if normalizar_cabecalho(c) in nomes)
        if encontrados >= minimo:
            return i
    return 0


# === VENDAS ===
def _montar_venda(linha, colunas, marketplace) -> VendaML:
    def celula(campo):
        idx = colunas[campo]
        return linha[idx] if idx < len(linha) else ""

    return VendaML(
        numero_venda=texto_celula(celula("numero_venda")),
        data_venda=texto_celula(celula("data_venda")),
        status=texto_celula(celula("status")),
        sku=texto_celula(celula("sku")),
        titulo_anuncio=texto_celula(celula("titulo_anuncio")),
        variacao=texto_celula(celula("variacao")),
        unidades=parsear_inteiro(celula("unidades")),
        preco_unitario=parsear_moeda(celula("preco_unitario")),
        receita_produtos=parsear_moeda(celula("receita_produtos")),
        receita_envio=parsear_moeda(celula("receita_envio")),
        tarifa_venda_impostos=parsear_moeda(celula("tarifa_venda_impostos")),
        tarifas_envio=parsear_moeda(celula("tarifas_envio")),
        cancelamentos_reembolsos=parsear_moeda(celula("cancelamentos_reembolsos")),
        total=parsear_moeda(celula("total")),
        custo_por_unidade=parsear_moeda(celula("custo_por_unidade")),
        tipo_anuncio=texto_celula(celula("tipo_anuncio")),
        marketplace=marketplace,
    )


def parsear_vendas(payload, marketplace=MARKETPLACE_PADRAO) -> list:
    """
    Transforma o relatório de vendas (texto CSV ou linhas de planilha) em VendaML.
    Primeira linha = cabeçalho. Linhas curtas ou sem nº de venda/título são descartadas.
    """
    linhas = normalizar_linhas(payload)
    if not linhas:
        return []

    colunas = mapear_colunas(linhas[0])
    vendas = []
    descartadas = 0

    for n, linha in enumerate(linhas[1:], start=2):
        if len(linha) < MIN_COLUNAS_VENDA:
            logger.debug(f"Linha {n} ignorada: {len(linha)} colunas")
            descartadas += 1
            continue

        venda = _montar_venda(linha, colunas, marketplace)
        if not venda.numero_venda or not venda.titulo_anuncio:
            logger.debug(f"Linha {n} ignorada: sem nº de venda ou título")
            descartadas += 1
            continue
        vendas.append(venda)

    logger.info(f"{len(vendas)} vendas lidas, {descartadas} linhas descartadas")
    return vendas


# === ARQUIVOS ===
def _ler_bytes(arquivo) -> bytes:
    if hasattr(arquivo, "getvalue"):
        return arquivo.getvalue()
    if hasattr(arquivo, "read"):
        return arquivo.read()
    return Path(arquivo).read_bytes()


def _decodificar(dados: bytes) -> str:
    try:
        return dados.decode("utf-8-sig")
    except UnicodeDecodeError:
        # exportações antigas do Excel em pt-BR
        return dados.decode("latin-1")


def _nome_arquivo(arquivo) -> str:
    return str(getattr(arquivo, "name", arquivo)).lower()


def ler_planilha_excel(arquivo, aba_preferida=None) -> list:
    """Lê uma aba do .xlsx como matriz de células (sem interpretar cabeçalho)."""
    xlsx = pd.ExcelFile(arquivo)
    aba = aba_preferida if aba_preferida in xlsx.sheet_names else xlsx.sheet_names[0]
    df = pd.read_excel(xlsx, sheet_name=aba, header=None, dtype=object)
    return normalizar_linhas(df.values.tolist())


def ler_linhas_arquivo(arquivo, aba_preferida=None) -> list:
    """CSV ou Excel enviado → lista de linhas. Falhas de leitura viram ErroPlanilha."""
    nome = _nome_arquivo(arquivo)
    try:
        if nome.endswith((".csv", ".txt")):
            return dividir_linhas_csv(_decodificar(_ler_bytes(arquivo)))
        return ler_planilha_excel(arquivo, aba_preferida)
    except ErroPlanilha:
        raise
    except Exception as e:
        raise ErroPlanilha(f"Não foi possível ler {nome}: {e}") from e


def ler_arquivo_vendas(arquivo, marketplace=MARKETPLACE_PADRAO) -> list:
    linhas = ler_linhas_arquivo(arquivo, aba_preferida=ABA_VENDAS)
    inicio = localizar_cabecalho(linhas)
    if inicio:
        logger.info(f"Cabeçalho de vendas encontrado na linha {inicio + 1}")
    return parsear_vendas(linhas[inicio:], marketplace)
