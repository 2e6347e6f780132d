import unittest
from datetime import date, datetime
from decimal import Decimal

from core.errors import ValidationError
from services.dashboard_service import DashboardService
from services.fluxo_caixa_service import calcular_tendencia, classificar_liquidez, projetar_saldo
from tests.base import ApiTestCase, dias


class TestIndicadores(unittest.TestCase):

    def test_tendencia_com_margem_de_cinco_por_cento(self):
        self.assertEqual(calcular_tendencia(Decimal("106"), Decimal("100")), "alta")
        self.assertEqual(calcular_tendencia(Decimal("104"), Decimal("100")), "estavel")
        self.assertEqual(calcular_tendencia(Decimal("94"), Decimal("100")), "baixa")

    def test_tendencia_sobre_resultado_negativo(self):
        self.assertEqual(calcular_tendencia(Decimal("-90"), Decimal("-100")), "alta")
        self.assertEqual(calcular_tendencia(Decimal("-110"), Decimal("-100")), "baixa")

    def test_tendencia_sem_mes_anterior(self):
        self.assertEqual(calcular_tendencia(Decimal("1"), Decimal("0")), "alta")
        self.assertEqual(calcular_tendencia(Decimal("0"), Decimal("0")), "estavel")
        self.assertEqual(calcular_tendencia(Decimal("-1"), Decimal("0")), "baixa")

    def test_liquidez(self):
        self.assertEqual(classificar_liquidez(Decimal("-1"), Decimal("100")), "critico")
        self.assertEqual(classificar_liquidez(Decimal("19.99"), Decimal("100")), "atencao")
        self.assertEqual(classificar_liquidez(Decimal("20"), Decimal("100")), "saudavel")
        self.assertEqual(classificar_liquidez(Decimal("0"), Decimal("0")), "saudavel")

    def test_saudacao(self):
        service = DashboardService()
        self.assertEqual(service._get_saudacao(datetime(2025, 1, 6, 11, 59)), "Bom dia")
        self.assertEqual(service._get_saudacao(datetime(2025, 1, 6, 12, 0)), "Boa tarde")
        self.assertEqual(service._get_saudacao(datetime(2025, 1, 6, 17, 59)), "Boa tarde")
        self.assertEqual(service._get_saudacao(datetime(2025, 1, 6, 18, 0)), "Boa noite")

    def test_projecao_fora_do_intervalo(self):
        for dias_projecao in (0, 366):
            with self.assertRaises(ValidationError):
                projetar_saldo(None, 1, dias=dias_projecao, hoje=date(2025, 1, 6))


class TestFluxoCaixaApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.banco = self.criar_banco()
        pagador = self.criar_pagador()

        atrasada = self.criar_conta_pagar(descricao="Energia", valor_original="100.00", data_vencimento=dias(5))
        r = self.put(f"/api/contas-pagar/{atrasada['id']}", {"data_vencimento": dias(-3)})
        self.assertEqual(r.status_code, 200, r.text)

        r = self.post("/api/contas-receber/", {
            "descricao": "Repasse", "valor_original": "400.00", "data_vencimento": dias(1), "pagador_id": pagador["id"],
        })
        self.assertEqual(r.status_code, 201, r.text)
        self.criar_conta_pagar(descricao="Aluguel", valor_original="1500.00", data_vencimento=dias(2))

    def test_projecao_diaria(self):
        r = self.get("/api/fluxo-caixa/projecao", params={"dias": 5})
        self.assertEqual(r.status_code, 200, r.text)
        projecao = r.json()
        self.assertEqual(len(projecao), 5)
        self.assertEqual(projecao[0]["data"], dias(0))
        # conta em atraso entra no primeiro dia
        self.assertEqual(projecao[0]["saidas"], 100.0)
        self.assertEqual([d["saldo"] for d in projecao], [4900.0, 5300.0, 3800.0, 3800.0, 3800.0])
        self.assertEqual(projecao[1]["entradas"], 400.0)

    def test_projecao_dias_invalidos(self):
        self.assertEqual(self.get("/api/fluxo-caixa/projecao", params={"dias": 0}).status_code, 422)
        self.assertEqual(self.get("/api/fluxo-caixa/projecao", params={"dias": 366}).status_code, 422)

    def test_fluxo_do_periodo(self):
        self.post("/api/vendas/", {"data_venda": dias(0), "valor_total": "250.00"})
        r = self.get("/api/fluxo-caixa", params={"data_inicio": dias(-5), "data_fim": dias(10)})
        self.assertEqual(r.status_code, 200, r.text)
        corpo = r.json()

        movimentacoes = corpo["movimentacoes"]
        self.assertEqual([m["origem"] for m in movimentacoes], ["conta_pagar", "venda", "conta_receber", "conta_pagar"])
        self.assertEqual([m["status"] for m in movimentacoes], ["em_atraso", "realizado", "previsto", "previsto"])
        self.assertEqual(movimentacoes[1]["tipo"], "entrada")

        indicadores = corpo["indicadores"]
        self.assertEqual(indicadores["saldo_atual"], 5000.0)
        self.assertEqual(indicadores["entradas_mes"], 250.0)
        self.assertEqual(indicadores["saidas_mes"], 0.0)
        self.assertEqual(indicadores["saldo_projetado_30d"], 3800.0)
        self.assertEqual(indicadores["status_liquidez"], "saudavel")
        self.assertIsNone(indicadores["dias_caixa"])
        self.assertEqual(indicadores["tendencia"], "alta")

        self.assertEqual(corpo["alertas"], [
            {"tipo": "error", "mensagem": "1 conta(s) a pagar vencida(s) totalizando R$ 100,00",
             "acao_url": "/contas-pagar?status=vencido"},
            {"tipo": "warning", "mensagem": "1 conta(s) a pagar vencem nos próximos 7 dias (R$ 1.500,00)",
             "acao_url": "/contas-pagar?status=pendente"},
        ])

    def test_pagamento_realizado_entra_pela_data_da_baixa(self):
        conta = self.criar_conta_pagar(descricao="Internet", valor_original="120.00", data_vencimento=dias(9))
        self.post(f"/api/contas-pagar/{conta['id']}/baixar", {"banco_id": self.banco["id"], "data_pagamento": dias(0)})

        corpo = self.get("/api/fluxo-caixa", params={"data_inicio": dias(0), "data_fim": dias(0)}).json()
        self.assertEqual([(m["descricao"], m["status"]) for m in corpo["movimentacoes"]], [("Internet", "realizado")])
        self.assertEqual(corpo["indicadores"]["saldo_atual"], 4880.0)
        self.assertEqual(corpo["indicadores"]["dias_caixa"], round(4880 / 4, 1))

    def test_saldo_baixo_e_projecao_negativa(self):
        self.criar_banco(nome="Caixa", codigo_banco="104", saldo_inicial=500)
        self.criar_conta_pagar(descricao="Fornecedor grande", valor_original="9000.00", data_vencimento=dias(15))

        alertas = self.get("/api/fluxo-caixa", params={"data_inicio": dias(-5), "data_fim": dias(10)}).json()["alertas"]
        mensagens = [a["mensagem"] for a in alertas]
        self.assertIn("Saldo projetado para 30 dias negativo: -R$ 4.700,00", mensagens)
        self.assertEqual(alertas[-1]["tipo"], "info")
        self.assertEqual(alertas[-1]["mensagem"], "Saldo baixo em Caixa: R$ 500,00")

    def test_periodo_invertido(self):
        r = self.get("/api/fluxo-caixa", params={"data_inicio": dias(10), "data_fim": dias(0)})
        self.assertEqual(r.status_code, 400)


class TestDashboardApi(ApiTestCase):

    def test_dashboard_sem_pendencias(self):
        self.criar_banco()
        r = self.get("/api/dashboard")
        self.assertEqual(r.status_code, 200, r.text)
        corpo = r.json()
        self.assertTrue(corpo["saudacao"].endswith(", Ana Souza!"))
        self.assertEqual(corpo["usuario_nome"], "Ana Souza")
        self.assertEqual(corpo["stats"]["saldo_bancos"], 5000.0)
        self.assertEqual(corpo["stats"]["contas_vencidas"], 0)
        self.assertEqual(len(corpo["grafico_mensal"]), 6)
        self.assertEqual(corpo["alertas"], [
            {"tipo": "success", "mensagem": "Nenhuma pendência financeira!", "acao_url": None},
        ])

    def test_cards(self):
        banco = self.criar_banco()
        self.post("/api/vendas/", {"data_venda": dias(0), "valor_total": "300.00"})
        self.post("/api/cheques/", {
            "banco_id": banco["id"], "numero_cheque": "15", "valor": "90.00", "data_emissao": dias(0),
        })
        conta = self.criar_conta_pagar(data_vencimento=dias(3))
        self.put(f"/api/contas-pagar/{conta['id']}", {"data_vencimento": dias(-1)})

        stats = self.get("/api/dashboard").json()["stats"]
        self.assertEqual(stats["vendas_mes"], 300.0)
        self.assertEqual(stats["cheques_pendentes"], 1)
        self.assertEqual(stats["contas_vencidas"], 1)

        grafico = self.get("/api/dashboard").json()["grafico_mensal"]
        self.assertEqual(grafico[-1]["ano"], date.today().year)
        self.assertEqual(grafico[-1]["entradas"], 300.0)

    def test_exige_token(self):
        r = self.client.get("/api/dashboard")
        self.assertEqual(r.status_code, 401)


if __name__ == "__main__":
    unittest.main()
