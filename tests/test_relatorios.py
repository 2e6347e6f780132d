import unittest
from datetime import date
from decimal import Decimal

from tests.base import ApiTestCase
from tools.relatorios import agrupar_por_categoria, agrupar_por_periodo, calcular_dre

RECEITAS = [
    {"categoria": "Vendas", "categoria_id": 1, "valor": 10000},
    {"categoria": "Serviços", "categoria_id": 2, "valor": 2000},
]
DESPESAS = [
    {"categoria": "Mercadorias", "categoria_id": 3, "tipo_dre": "custo", "valor": 4000},
    {"categoria": "Aluguel", "categoria_id": 4, "tipo_dre": "despesa_operacional", "valor": 1500},
    {"categoria": "Energia", "categoria_id": 5, "tipo_dre": "despesa_operacional", "valor": 500},
]


def _linhas_por_codigo(dre):
    return {l["codigo"]: l for l in dre["linhas"]}


class TestCalcularDRE(unittest.TestCase):

    def test_estrutura_e_percentuais_padrao(self):
        dre = calcular_dre(RECEITAS, DESPESAS)
        codigos = [l["codigo"] for l in dre["linhas"]]
        self.assertEqual(codigos, ["1", "1.1", "1.2", "2", "2.1", "2.2", "RL", "3", "LB", "4", "4.1", "4.2", "RL_FINAL"])

        linhas = _linhas_por_codigo(dre)
        self.assertEqual(linhas["1.1"]["descricao"], "Vendas")
        self.assertEqual(linhas["2"]["valor"], Decimal("-1200.00"))
        self.assertEqual(linhas["2.1"]["valor"], Decimal("-1020.00"))
        self.assertEqual(linhas["2.2"]["valor"], Decimal("-180.00"))
        self.assertEqual(linhas["4.1"]["valor"], Decimal("-1500.00"))

    def test_metricas(self):
        m = calcular_dre(RECEITAS, DESPESAS)["metricas"]
        self.assertEqual(m["receita_bruta"], Decimal("12000.00"))
        self.assertEqual(m["deducoes"], Decimal("1200.00"))
        self.assertEqual(m["receita_liquida"], Decimal("10800.00"))
        self.assertEqual(m["custos"], Decimal("4000.00"))
        self.assertEqual(m["lucro_bruto"], Decimal("6800.00"))
        self.assertEqual(m["despesas_operacionais"], Decimal("2000.00"))
        self.assertEqual(m["resultado_liquido"], Decimal("4800.00"))
        self.assertEqual(m["margem_bruta"], Decimal("62.96"))
        self.assertEqual(m["margem_liquida"], Decimal("44.44"))

    def test_dados_essenciais_substituem_calculo(self):
        dre = calcular_dre(RECEITAS, DESPESAS, {"cmv_valor": 3000, "deducoes_receita": 600})
        linhas = _linhas_por_codigo(dre)
        self.assertEqual(linhas["2.1"]["valor"], Decimal("-510.00"))
        self.assertEqual(linhas["2.2"]["valor"], Decimal("-90.00"))
        self.assertEqual(dre["metricas"]["custos"], Decimal("3000.00"))
        self.assertEqual(dre["metricas"]["resultado_liquido"], Decimal("6400.00"))

    def test_sem_receita_margens_zeradas(self):
        m = calcular_dre([], DESPESAS[1:])["metricas"]
        self.assertEqual(m["resultado_liquido"], Decimal("-2000.00"))
        self.assertEqual(m["margem_bruta"], Decimal("0"))
        self.assertEqual(m["margem_liquida"], Decimal("0"))

    def test_comparacao_com_periodo_anterior(self):
        anterior = calcular_dre([{"categoria": "Vendas", "categoria_id": 1, "valor": 8000}], [])
        dre = calcular_dre(RECEITAS, DESPESAS, comparacao=anterior)
        linhas = _linhas_por_codigo(dre)

        self.assertEqual(linhas["1"]["valor_comparacao"], Decimal("8000.00"))
        self.assertEqual(linhas["1"]["variacao_percentual"], Decimal("50.00"))
        self.assertEqual(linhas["1.1"]["variacao_percentual"], Decimal("25.00"))
        # Serviços não existia no período anterior
        self.assertEqual(linhas["1.2"]["valor_comparacao"], Decimal("0"))
        self.assertIsNone(linhas["1.2"]["variacao_percentual"])


class TestAgrupamentos(unittest.TestCase):

    def test_por_categoria_ordenado_pelo_total(self):
        grupos = agrupar_por_categoria([
            {"data": date(2025, 1, 5), "valor": 100, "categoria": "Aluguel"},
            {"data": date(2025, 1, 6), "valor": 300, "categoria": "Energia"},
            {"data": date(2025, 1, 7), "valor": 100, "categoria": "Aluguel"},
        ])
        self.assertEqual([g["chave"] for g in grupos], ["Energia", "Aluguel"])
        self.assertEqual(grupos[0]["percentual"], 60.0)
        self.assertEqual(grupos[1]["total"], 200.0)
        self.assertEqual(grupos[1]["quantidade"], 2)

    def test_sem_categoria(self):
        grupos = agrupar_por_categoria([{"data": date(2025, 1, 5), "valor": 50, "categoria": None}])
        self.assertEqual(grupos[0]["rotulo"], "Sem categoria")

    def test_por_semana_iso(self):
        grupos = agrupar_por_periodo([
            {"data": date(2025, 1, 6), "valor": 10},
            {"data": date(2025, 1, 12), "valor": 20},
            {"data": date(2025, 1, 13), "valor": 30},
        ], "semana")
        self.assertEqual([g["chave"] for g in grupos], ["2025-W02", "2025-W03"])
        self.assertEqual(grupos[0]["total"], 30.0)
        self.assertEqual(grupos[0]["rotulo"], "Semana 02/2025")

    def test_por_mes_e_ano(self):
        linhas = [
            {"data": date(2024, 12, 30), "valor": 40},
            {"data": date(2025, 1, 2), "valor": 60},
        ]
        meses = agrupar_por_periodo(linhas, "mes")
        self.assertEqual([(g["chave"], g["rotulo"]) for g in meses], [("2024-12", "Dez/2024"), ("2025-01", "Jan/2025")])
        anos = agrupar_por_periodo(linhas, "ano")
        self.assertEqual([g["chave"] for g in anos], ["2024", "2025"])

    def test_granularidade_invalida(self):
        with self.assertRaises(ValueError):
            agrupar_por_periodo([{"data": date(2025, 1, 1), "valor": 1}], "trimestre")

    def test_lista_vazia(self):
        self.assertEqual(agrupar_por_periodo([], "dia"), [])
        self.assertEqual(agrupar_por_categoria([]), [])


class TestRelatoriosApi(ApiTestCase):

    def _movimentar_janeiro(self):
        categoria = self.criar_categoria("4.1", "Aluguel")
        r = self.post("/api/vendas/", {"data_venda": "2025-01-15", "valor_total": "1000.00"})
        self.assertEqual(r.status_code, 201, r.text)
        conta = self.criar_conta_pagar(valor_original="300.00", plano_conta_id=categoria["id"])
        r = self.post(f"/api/contas-pagar/{conta['id']}/baixar", {"data_pagamento": "2025-01-20"})
        self.assertEqual(r.status_code, 200, r.text)

    def test_dre_do_mes(self):
        self._movimentar_janeiro()
        r = self.get("/api/relatorios/dre", params={"mes_inicio": "2025-01"})
        self.assertEqual(r.status_code, 200, r.text)
        metricas = r.json()["metricas"]
        self.assertEqual(metricas["receita_bruta"], 1000.0)
        self.assertEqual(metricas["receita_liquida"], 900.0)
        self.assertEqual(metricas["despesas_operacionais"], 300.0)
        self.assertEqual(metricas["resultado_liquido"], 600.0)
        self.assertEqual(metricas["margem_liquida"], 66.67)

    def test_dre_com_comparacao(self):
        self._movimentar_janeiro()
        self.post("/api/vendas/", {"data_venda": "2024-12-10", "valor_total": "500.00"})
        r = self.get("/api/relatorios/dre", params={"mes_inicio": "2025-01", "comparar_com_anterior": True})
        corpo = r.json()
        self.assertEqual(corpo["metricas_comparacao"]["receita_bruta"], 500.0)
        linha = next(l for l in corpo["linhas"] if l["codigo"] == "1")
        self.assertEqual(linha["variacao_percentual"], 100.0)

    def test_dre_mes_invertido(self):
        r = self.get("/api/relatorios/dre", params={"mes_inicio": "2025-03", "mes_fim": "2025-01"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "VALIDATION_ERROR")

    def test_dre_usa_dados_essenciais(self):
        self._movimentar_janeiro()
        r = self.put("/api/relatorios/dados-essenciais", {"mes_referencia": "2025-01", "cmv_valor": "200.00"})
        self.assertEqual(r.status_code, 200, r.text)
        metricas = self.get("/api/relatorios/dre", params={"mes_inicio": "2025-01"}).json()["metricas"]
        self.assertEqual(metricas["custos"], 200.0)
        self.assertEqual(metricas["lucro_bruto"], 700.0)

    def test_agrupamento_por_categoria(self):
        self._movimentar_janeiro()
        r = self.get("/api/relatorios/agrupamento", params={
            "data_inicio": "2025-01-01", "data_fim": "2025-01-31", "tipo": "despesas",
        })
        self.assertEqual(r.status_code, 200, r.text)
        corpo = r.json()
        self.assertEqual(corpo["total_geral"], 300.0)
        self.assertEqual(corpo["grupos"][0]["rotulo"], "Aluguel")
        self.assertEqual(corpo["grupos"][0]["percentual"], 100.0)

    def test_agrupamento_de_receitas_por_mes(self):
        self._movimentar_janeiro()
        r = self.get("/api/relatorios/agrupamento", params={
            "data_inicio": "2025-01-01", "data_fim": "2025-01-31", "tipo": "receitas", "agrupamento": "mes",
        })
        self.assertEqual(r.json()["grupos"][0]["rotulo"], "Jan/2025")

    def test_ciclo_dos_dados_essenciais(self):
        r = self.put("/api/relatorios/dados-essenciais", {"mes_referencia": "2025-02", "percentual_impostos": "6"})
        self.assertEqual(r.status_code, 200, r.text)
        r = self.put("/api/relatorios/dados-essenciais", {"mes_referencia": "2025-02", "percentual_impostos": "7"})
        self.assertEqual(r.json()["percentual_impostos"], 7.0)
        self.assertEqual(len(self.get("/api/relatorios/dados-essenciais").json()), 1)

        self.assertEqual(self.get("/api/relatorios/dados-essenciais/2025-02").status_code, 200)
        self.assertEqual(self.delete("/api/relatorios/dados-essenciais/2025-02").status_code, 204)
        self.assertEqual(self.get("/api/relatorios/dados-essenciais/2025-02").status_code, 404)


if __name__ == "__main__":
    unittest.main()
