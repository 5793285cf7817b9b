"""Registros de venda, custo e lucro usados pelo painel."""
from dataclasses import dataclass
from typing import Tuple

from config import MARKETPLACE_PADRAO


@dataclass(frozen=True)
class VendaML:
    """
    Uma linha do relatório de vendas, antes do cálculo de lucro.

    Tarifas e cancelamentos mantêm o sinal do relatório: negativo = dinheiro saindo.
    """
    numero_venda: str
    data_venda: str = ""
    status: str = ""
    sku: str = ""
    titulo_anuncio: str = ""
    variacao: str = ""
    unidades: int = 0
    preco_unitario: float = 0.0
    receita_produtos: float = 0.0
    receita_envio: float = 0.0
    tarifa_venda_impostos: float = 0.0
    tarifas_envio: float = 0.0
    cancelamentos_reembolsos: float = 0.0
    total: float = 0.0
    custo_por_unidade: float = 0.0
    tipo_anuncio: str = ""
    marketplace: str = MARKETPLACE_PADRAO


@dataclass(frozen=True)
class ProdutoCusto:
    titulo: str
    custo: float
    comissao: float = 0.0
    frete: float = 0.0


@dataclass(frozen=True)
class LucroCalculado:
    """Venda + decomposição do lucro real. Valores de custo sempre positivos."""
    numero_venda: str
    data_venda: str
    status: str
    sku: str
    titulo_anuncio: str
    variacao: str
    unidades: int

    preco_venda: float           # unitário
    receita_produtos: float
    custo_produto: float         # total (custo unitário x unidades)
    custo_por_unidade: float
    comissao_marketplace: float  # total
    comissao_por_unidade: float
    frete: float                 # total
    frete_por_unidade: float
    receita_envio: float
    impostos: float              # estimativa
    taxas_extras: float          # cancelamentos e reembolsos
    total_recebido: float        # soma com sinal, fonte da verdade
    total_informado: float       # Total (BRL) do relatório, só conferência

    lucro_real: float
    margem_percentual: float
    tem_prejuizo: bool
    problemas: Tuple[str, ...] = ()

    custo_encontrado: bool = True
    tipo_anuncio: str = ""
    marketplace: str = MARKETPLACE_PADRAO

    @property
    def divergencia_total(self) -> float:
        return self.total_recebido - self.total_informado

    @property
    def comissao_sem_impostos(self) -> float:
        return self.comissao_marketplace - self.impostos


@dataclass(frozen=True)
class LucroPorProduto:
    titulo_anuncio: str
    sku: str
    total_vendas: int
    total_unidades: int
    receita_total: float
    custo_total: float
    comissao_total: float
    frete_total: float
    lucro_total: float
    margem_media: float
    tem_prejuizo: bool
    vendas: Tuple[LucroCalculado, ...] = ()


@dataclass(frozen=True)
class LucroPorPedido:
    numero_venda: str
    data_venda: str
    total_unidades: int
    receita_produtos: float
    receita_total: float
    custo_total: float
    comissao_total: float
    frete_total: float
    lucro_total: float
    margem: float
    tem_prejuizo: bool
    vendas: Tuple[LucroCalculado, ...] = ()


@dataclass(frozen=True)
class ResumoLucro:
    total_vendas: int = 0
    total_receita: float = 0.0
    total_custo: float = 0.0
    total_lucro: float = 0.0
    vendas_com_prejuizo: int = 0
    produtos_com_prejuizo: int = 0
