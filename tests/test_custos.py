from io import BytesIO

import pytest

import utils.custos as custos_mod
from config import POLITICA_PADRAO, PoliticaLucro
from planilha_utils import ErroPlanilha
from utils.custos import (
    carregar_custos_google,
    carregar_produtos_custo,
    conectar_google,
    custos_para_dataframe,
    ler_arquivo_custos,
    parsear_custos,
)


class _Aba:
    def __init__(self, valores):
        self.valores = valores

    def get_all_values(self):
        return self.valores


class _Planilha:
    def __init__(self, valores):
        self.sheet1 = _Aba(valores)


class ClienteFalso:
    def __init__(self, valores=None, erro=None):
        self.valores = valores or []
        self.erro = erro
        self.abertas = []

    def open(self, nome):
        self.abertas.append(nome)
        if self.erro:
            raise self.erro
        return _Planilha(self.valores)


def test_cabecalho_encontrado_pelo_nome():
    texto = (
        "Tabela de custos atualizada\n"
        "Produto,Custo Produção,Fornecedor\n"
        "Creatina 300g,\"40,00\",Growth\n"
        "Whey Protein 900g,\"R$ 1.050,00\",Max\n"
    )
    assert parsear_custos(texto) == {"Creatina 300g": 40.0, "Whey Protein 900g": 1050.0}


def test_colunas_fora_da_ordem():
    linhas = [["SKU", "Custo por unidade", "Título do anúncio"], ["3888", "12,50", "BCAA 120 caps"]]
    assert parsear_custos(linhas) == {"BCAA 120 caps": 12.5}


def test_sem_cabecalho_pula_linhas_fixas():
    texto = "Custos novembro\nrevisado\nCreatina 300g,\"40,00\"\n"
    assert parsear_custos(texto) == {"Creatina 300g": 40.0}


def test_custo_zero_ou_vazio_e_ignorado():
    linhas = [
        ["Produto", "Custo"],
        ["Creatina 300g", "0,00"],
        ["Colágeno 250g", ""],
        ["", "30,00"],
        ["Ômega 3", "-5,00"],
        ["Vitamina C", "18,90"],
        ["linha curta"],
    ]
    assert parsear_custos(linhas) == {"Vitamina C": 18.9}


def test_titulo_repetido_vale_o_ultimo():
    linhas = [["Produto", "Custo"], ["Creatina 300g", "40,00"], ["Whey", "90,00"], ["Creatina 300g", "42,00"]]
    custos = parsear_custos(linhas)
    assert custos == {"Creatina 300g": 42.0, "Whey": 90.0}
    # posição da primeira ocorrência é mantida (ordem da busca por título)
    assert list(custos) == ["Creatina 300g", "Whey"]


def test_titulo_com_espacos():
    assert parsear_custos([["Produto", "Custo"], ["  Creatina 300g  ", 40]]) == {"Creatina 300g": 40.0}


def test_vazio():
    assert parsear_custos("") == {}
    assert parsear_custos([]) == {}


def test_carregar_produtos_custo_simplificado():
    produtos = carregar_produtos_custo([["Produto", "Custo"], ["Creatina 300g", "40,00"]])

    assert len(produtos) == 1
    produto = produtos[0]
    assert produto.titulo == "Creatina 300g"
    assert produto.custo == pytest.approx(40.0)
    assert produto.comissao == pytest.approx(40.0 * POLITICA_PADRAO.comissao_padrao)
    assert produto.frete == pytest.approx(15.0)


def test_carregar_produtos_custo_com_politica():
    politica = PoliticaLucro(comissao_padrao=0.2, frete_padrao=9.9)
    produto = carregar_produtos_custo({"Whey": 100.0}, politica)[0]
    assert produto.comissao == pytest.approx(20.0)
    assert produto.frete == pytest.approx(9.9)


def test_ler_arquivo_custos_csv():
    arquivo = BytesIO("Produto,Custo\nColágeno 250g,\"35,50\"\n".encode("utf-8"))
    arquivo.name = "custos.csv"
    assert ler_arquivo_custos(arquivo) == {"Colágeno 250g": 35.5}


def test_google_sheets_somente_leitura():
    cliente = ClienteFalso([["Produto", "Custo"], ["Creatina 300g", "40,00"], ["Whey", "R$ 90,00"]])

    custos = carregar_custos_google(cliente)

    assert cliente.abertas == ["CUSTOS_ML"]
    assert custos == {"Creatina 300g": 40.0, "Whey": 90.0}


def test_google_sheets_erro_vira_erro_planilha():
    cliente = ClienteFalso(erro=RuntimeError("SpreadsheetNotFound"))
    with pytest.raises(ErroPlanilha, match="SpreadsheetNotFound"):
        carregar_custos_google(cliente, "OUTRA")
    assert cliente.abertas == ["OUTRA"]


def test_conectar_google_corrige_private_key(monkeypatch):
    recebido = {}

    def credenciais(info, scopes):
        recebido["info"] = info
        recebido["scopes"] = scopes
        return "creds"

    monkeypatch.setattr(custos_mod.Credentials, "from_service_account_info", credenciais)
    monkeypatch.setattr(custos_mod.gspread, "authorize", lambda creds: ("cliente", creds))

    cliente = conectar_google({"private_key": "-----BEGIN\\nabc\\n-----END", "client_email": "x@y"})

    assert cliente == ("cliente", "creds")
    assert recebido["info"]["private_key"] == "-----BEGIN\nabc\n-----END"
    assert "https://www.googleapis.com/auth/drive" in recebido["scopes"]


def test_custos_para_dataframe():
    df = custos_para_dataframe({"Creatina 300g": 40.0})
    assert list(df.columns) == ["Produto", "Custo_Produto"]
    assert df.iloc[0]["Custo_Produto"] == 40.0


def test_custo_com_ponto_decimal_nao_muda_de_escala():
    linhas = [
        ["SKU", "Produto", "Custo_Produto"],
        ["1", "Creatina 300g", "162.49"],
        ["2", "Whey 900g", "1.250,00"],
        ["3", "BCAA", "R$ 1.250"],
    ]
    assert parsear_custos(linhas) == {"Creatina 300g": 162.49, "Whey 900g": 1250.0, "BCAA": 1250.0}
