from datetime import datetime, time

from agregacao import parsear_data_venda
from config import MARKETPLACE_PADRAO, MARKETPLACE_TODOS, MARKETPLACES


def filtrar_por_marketplace(registros, marketplace: str) -> list:
    """
    "Todos"/"Marketplace" → tudo.
    Marketplace conhecido → só os registros dele (vazio se ainda não há dados).
    Valor desconhecido → tudo (filtro inválido nunca esconde dados).
    """
    if marketplace in MARKETPLACE_TODOS or marketplace not in MARKETPLACES:
        return list(registros)
    return [r for r in registros if getattr(r, "marketplace", MARKETPLACE_PADRAO) == marketplace]


def filtrar_por_busca(registros, termo: str) -> list:
    """Busca por título, SKU ou nº de venda (o que o registro tiver)."""
    busca = (termo or "").strip().lower()
    if not busca:
        return list(registros)

    def combina(r):
        campos = (getattr(r, "titulo_anuncio", ""), getattr(r, "sku", ""), getattr(r, "numero_venda", ""))
        return any(busca in (c or "").lower() for c in campos)

    return [r for r in registros if combina(r)]


def filtrar_por_status(registros, status: str) -> list:
    if status == "lucro":
        return [r for r in registros if not r.tem_prejuizo]
    if status == "prejuizo":
        return [r for r in registros if r.tem_prejuizo]
    return list(registros)


def filtrar_por_periodo(registros, inicio, fim) -> list:
    """Dias inclusivos. Registro sem data reconhecível fica de fora."""
    de = datetime.combine(inicio, time.min)
    ate = datetime.combine(fim, time.max)

    selecionados = []
    for r in registros:
        data = parsear_data_venda(r.data_venda)
        if data is not None and de <= data <= ate:
            selecionados.append(r)
    return selecionados
