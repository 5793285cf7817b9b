import logging
from typing import Callable, Mapping, Optional

import pandas as pd

from config import (
    POLITICA_PADRAO,
    PROBLEMA_COMISSAO_ALTA,
    PROBLEMA_CUSTO_ALTO,
    PROBLEMA_FRETE_CARO,
    PROBLEMA_REEMBOLSO,
)
from modelos import LucroCalculado, VendaML

logger = logging.getLogger(__name__)

# (venda, custos) -> custo unitário ou None
ResolvedorCusto = Callable[[VendaML, Mapping[str, float]], Optional[float]]


def _valor(v) -> float:
    """None / NaN / texto inválido → 0.0"""
    if v is None:
        return 0.0
    try:
        v = float(v)
    except (TypeError, ValueError):
        return 0.0
    if pd.isna(v) or v in (float("inf"), float("-inf")):
        return 0.0
    return v


def resolver_custo_por_titulo(venda: VendaML, custos: Mapping[str, float]) -> Optional[float]:
    """
    Primeiro custo cujo título contém o título do anúncio ou está contido nele
    (sem diferenciar maiúsculas). Percorre na ordem de inserção e para no primeiro.
    """
    titulo = (venda.titulo_anuncio or "").lower()
    if not titulo:
        return None
    for titulo_custo, custo in custos.items():
        chave = titulo_custo.lower()
        if chave and (chave in titulo or titulo in chave):
            return custo
    return None


def resolver_custo(venda: VendaML, custos: Mapping[str, float],
                   resolvedor: ResolvedorCusto = resolver_custo_por_titulo) -> float:
    """
    Regras:
    ✔ Custo por unidade já veio no relatório (> 0) → usa direto.
    ✔ Senão procura na tabela de custos pelo título.
    ✔ Nada encontrado → 0 (custo fica subestimado, não é erro).
    """
    custo = _valor(venda.custo_por_unidade)
    if custo > 0:
        return custo
    return _valor(resolvedor(venda, custos))


def diagnosticar_problemas(custo_total, total_recebido, comissao, frete, taxas_extras,
                           receita_produtos, politica=POLITICA_PADRAO) -> tuple:
    """Motivos do prejuízo, na ordem: custo, comissão, frete, reembolso."""
    problemas = []
    if custo_total > total_recebido:
        problemas.append(PROBLEMA_CUSTO_ALTO)
    if comissao > receita_produtos * politica.limite_comissao:
        problemas.append(PROBLEMA_COMISSAO_ALTA)
    if frete > receita_produtos * politica.limite_frete:
        problemas.append(PROBLEMA_FRETE_CARO)
    if taxas_extras > 0:
        problemas.append(PROBLEMA_REEMBOLSO)
    return tuple(problemas)


def calcular_lucro(venda: VendaML, custos: Mapping[str, float], politica=POLITICA_PADRAO,
                   resolvedor: ResolvedorCusto = resolver_custo_por_titulo) -> LucroCalculado:
    """
    Lucro real de uma venda.

    Tarifas vêm NEGATIVAS do relatório (ex: -15,30). Para exibir custo usamos abs();
    para o total recebido somamos com o sinal original:

        total_recebido = receita produtos + receita envio + tarifa venda + tarifas envio + cancelamentos
        lucro_real     = total_recebido - custo unitário x unidades

    O "Total (BRL)" do relatório é só conferência; o recálculo acima é o que vale.
    """
    unidades = max(int(_valor(venda.unidades)), 0)
    receita_produtos = _valor(venda.receita_produtos)
    receita_envio = _valor(venda.receita_envio)
    tarifa_venda = _valor(venda.tarifa_venda_impostos)
    tarifas_envio = _valor(venda.tarifas_envio)
    cancelamentos = _valor(venda.cancelamentos_reembolsos)

    custo_unitario = resolver_custo(venda, custos, resolvedor)

    comissao = abs(tarifa_venda)
    frete = abs(tarifas_envio)
    taxas_extras = abs(cancelamentos)

    total_recebido = receita_produtos + receita_envio + tarifa_venda + tarifas_envio + cancelamentos
    custo_total = custo_unitario * unidades
    lucro_real = total_recebido - custo_total
    margem = (lucro_real / total_recebido) * 100 if total_recebido > 0 else 0.0
    tem_prejuizo = lucro_real < 0

    problemas = ()
    if tem_prejuizo:
        problemas = diagnosticar_problemas(
            custo_total, total_recebido, comissao, frete, taxas_extras, receita_produtos, politica
        )

    return LucroCalculado(
        numero_venda=venda.numero_venda,
        data_venda=venda.data_venda,
        status=venda.status,
        sku=venda.sku,
        titulo_anuncio=venda.titulo_anuncio,
        variacao=venda.variacao,
        unidades=unidades,
        preco_venda=_valor(venda.preco_unitario),
        receita_produtos=receita_produtos,
        custo_produto=custo_total,
        custo_por_unidade=custo_unitario,
        comissao_marketplace=comissao,
        comissao_por_unidade=comissao / unidades if unidades > 0 else 0.0,
        frete=frete,
        frete_por_unidade=frete / unidades if unidades > 0 else 0.0,
        receita_envio=receita_envio,
        impostos=comissao * politica.parcela_imposto,  # estimativa
        taxas_extras=taxas_extras,
        total_recebido=total_recebido,
        total_informado=_valor(venda.total),
        lucro_real=lucro_real,
        margem_percentual=margem,
        tem_prejuizo=tem_prejuizo,
        problemas=problemas,
        custo_encontrado=custo_unitario > 0,
        tipo_anuncio=venda.tipo_anuncio,
        marketplace=venda.marketplace,
    )


def calcular_lucros(vendas, custos: Mapping[str, float], politica=POLITICA_PADRAO,
                    resolvedor: ResolvedorCusto = resolver_custo_por_titulo) -> list:
    """Calcula o lucro de todas as vendas contra o MESMO snapshot da tabela de custos."""
    custos = dict(custos)
    lucros = [calcular_lucro(v, custos, politica, resolvedor) for v in vendas]

    sem_custo = sum(1 for l in lucros if not l.custo_encontrado)
    prejuizos = sum(1 for l in lucros if l.tem_prejuizo)
    divergentes = sum(1 for l in lucros if l.total_informado and abs(l.divergencia_total) > 0.01)

    logger.info(f"{len(lucros)} vendas calculadas, {prejuizos} com prejuízo")
    if sem_custo:
        logger.warning(f"{sem_custo} vendas sem custo de produto encontrado (custo = 0)")
    if divergentes:
        logger.warning(f"{divergentes} vendas com Total (BRL) diferente do total recalculado")
    return lucros
