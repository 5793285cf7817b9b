# utils/relatorio.py
from io import BytesIO

import pandas as pd

from agregacao import lucros_para_dataframe, produtos_para_dataframe

COLUNAS_DINHEIRO = ("Preco", "Receita", "Comissao", "Impostos", "Frete", "Cancelamentos",
                    "Total", "Custo", "Lucro")

AJUDA = [
    ["Coluna", "Descrição", "Exemplo"],
    ["Venda", "Número da venda no Mercado Livre.", "200009741628937"],
    ["Unidades", "Quantidade vendida.", "2"],
    ["Receita_Produtos", "Receita por produtos (BRL).", "160,00"],
    ["Receita_Envio", "Valor pago pelo comprador pelo frete.", "10,00"],
    ["Comissao", "Tarifa de venda e impostos do ML (valor absoluto).", "20,00"],
    ["Impostos_Estimados", "ESTIMATIVA: 30% da tarifa de venda e impostos.", "6,00"],
    ["Frete", "Tarifas de envio (valor absoluto).", "8,00"],
    ["Cancelamentos", "Cancelamentos e reembolsos (valor absoluto).", "0,00"],
    ["Total_Recebido", "Receitas + tarifas + cancelamentos, somados com sinal.", "142,00"],
    ["Custo_Unitario", "Custo do relatório ou da planilha de custos (busca por título).", "40,00"],
    ["Custo_Total", "Custo unitário × unidades.", "80,00"],
    ["Lucro_Real", "Total_Recebido − Custo_Total.", "62,00"],
    ["Margem_%", "Lucro_Real ÷ Total_Recebido (0 se não houve recebimento).", "43,66%"],
    ["Problemas", "Só em vendas com prejuízo: custo, comissão, frete ou reembolso.", "Frete muito caro"],
]


def _escrever_aba(writer, df, nome_aba, coluna_lucro):
    df.to_excel(writer, index=False, sheet_name=nome_aba, header=False, startrow=1)
    wb = writer.book
    ws = writer.sheets[nome_aba]

    # === FORMATOS ===
    fmt_header = wb.add_format({"bold": True, "bg_color": "#FFFFFF", "align": "center", "valign": "vcenter", "border": 1})
    fmt_money = wb.add_format({"num_format": "R$ #,##0.00", "border": 1})
    fmt_pct = wb.add_format({"num_format": "0.00", "border": 1})
    fmt_txt = wb.add_format({"border": 1})
    # Linhas com prejuízo (vermelho claro)
    fmt_prej_money = wb.add_format({"num_format": "R$ #,##0.00", "bg_color": "#FDE2E2", "border": 1})
    fmt_prej_pct = wb.add_format({"num_format": "0.00", "bg_color": "#FDE2E2", "border": 1})
    fmt_prej_txt = wb.add_format({"bg_color": "#FDE2E2", "border": 1})

    headers = list(df.columns)
    ws.set_row(0, 22)
    for j, col_name in enumerate(headers):
        ws.write(0, j, col_name, fmt_header)
        if "%" in col_name:
            ws.set_column(j, j, 12)
        elif col_name.startswith(COLUNAS_DINHEIRO):
            ws.set_column(j, j, 16)
        else:
            ws.set_column(j, j, 20)

    for i, (_, row_data) in enumerate(df.iterrows(), start=1):
        prejuizo = row_data[coluna_lucro] < 0
        money, pct, txt = (fmt_prej_money, fmt_prej_pct, fmt_prej_txt) if prejuizo else (fmt_money, fmt_pct, fmt_txt)

        for j, col_name in enumerate(headers):
            valor = row_data[col_name]
            if pd.isna(valor):
                ws.write_blank(i, j, None, txt)
            elif isinstance(valor, str):
                ws.write_string(i, j, valor, txt)
            elif "%" in col_name:
                ws.write_number(i, j, valor, pct)
            elif col_name.startswith(COLUNAS_DINHEIRO):
                ws.write_number(i, j, valor, money)
            else:
                ws.write_number(i, j, valor, txt)


def gerar_relatorio_excel(lucros, produtos) -> BytesIO:
    """Relatório .xlsx com abas Vendas, Produtos e AJUDA."""
    output = BytesIO()
    with pd.ExcelWriter(output, engine="xlsxwriter") as writer:
        _escrever_aba(writer, lucros_para_dataframe(lucros), "Vendas", "Lucro_Real")
        _escrever_aba(writer, produtos_para_dataframe(produtos), "Produtos", "Lucro_Total")

        # === ABA DE AJUDA ===
        df_ajuda = pd.DataFrame(AJUDA[1:], columns=AJUDA[0])
        df_ajuda.to_excel(writer, index=False, sheet_name="AJUDA")
        wb = writer.book
        ws_ajuda = writer.sheets["AJUDA"]
        fmt_header_ajuda = wb.add_format({"bold": True, "bg_color": "#92D050", "align": "center", "valign": "vcenter", "border": 1})
        fmt_text_ajuda = wb.add_format({"text_wrap": True, "valign": "top", "border": 1})
        fmt_exemplo = wb.add_format({"italic": True, "color": "#666666", "border": 1})
        ws_ajuda.set_row(0, 28, fmt_header_ajuda)
        ws_ajuda.set_column("A:A", 25, fmt_text_ajuda)
        ws_ajuda.set_column("B:B", 80, fmt_text_ajuda)
        ws_ajuda.set_column("C:C", 25, fmt_exemplo)

    output.seek(0)
    return output
