import unittest
from datetime import date, timedelta
from decimal import Decimal

from core.errors import ValidationError
from services.lancamento_lote_service import ParcelaGerada, gerar_parcelas, validar_lancamento
from tests.base import ApiTestCase, dias

HOJE = date(2025, 1, 15)


class TestGerarParcelas(unittest.TestCase):

    def test_sobra_de_centavos_vai_para_ultima_parcela(self):
        parcelas = gerar_parcelas(3, date(2025, 2, 1), valor_total="1000")
        self.assertEqual([p.valor for p in parcelas], [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")])
        self.assertEqual([p.numero for p in parcelas], [1, 2, 3])

    def test_soma_bate_com_o_total(self):
        parcelas = gerar_parcelas(7, date(2025, 2, 1), valor_total=Decimal("100"))
        self.assertEqual(sum(p.valor for p in parcelas), Decimal("100.00"))
        self.assertEqual(parcelas[-1].valor, Decimal("14.32"))

    def test_mensal_sempre_a_partir_do_primeiro_vencimento(self):
        parcelas = gerar_parcelas(3, date(2025, 1, 31), valor_parcela=100)
        self.assertEqual(
            [p.data_vencimento for p in parcelas],
            [date(2025, 1, 31), date(2025, 2, 28), date(2025, 3, 31)],
        )

    def test_valor_da_parcela_fixo(self):
        parcelas = gerar_parcelas(4, date(2025, 2, 1), valor_parcela="250", intervalo="semanal")
        self.assertTrue(all(p.valor == Decimal("250.00") for p in parcelas))
        self.assertEqual(parcelas[3].data_vencimento, date(2025, 2, 22))

    def test_outros_intervalos(self):
        inicio = date(2025, 2, 1)
        self.assertEqual(gerar_parcelas(2, inicio, 10, intervalo="quinzenal")[1].data_vencimento, inicio + timedelta(days=15))
        self.assertEqual(gerar_parcelas(2, inicio, 10, intervalo="bimestral")[1].data_vencimento, date(2025, 4, 1))
        self.assertEqual(gerar_parcelas(3, inicio, 10, intervalo="trimestral")[2].data_vencimento, date(2025, 8, 1))

    def test_intervalo_invalido(self):
        with self.assertRaises(ValidationError):
            gerar_parcelas(2, date(2025, 2, 1), valor_total=100, intervalo="anual")

    def test_sem_valor(self):
        with self.assertRaises(ValidationError):
            gerar_parcelas(2, date(2025, 2, 1))

    def test_zero_parcelas(self):
        self.assertEqual(gerar_parcelas(0, date(2025, 2, 1), valor_total=100), [])

    def test_acima_do_maximo(self):
        self.assertEqual(len(gerar_parcelas(100, date(2025, 2, 1), valor_parcela=10)), 100)
        with self.assertRaises(ValidationError) as ctx:
            gerar_parcelas(100000, date(2025, 2, 1), valor_total=100)
        self.assertEqual(ctx.exception.errors, ["Máximo de 100 parcelas permitidas"])


class TestValidarLancamento(unittest.TestCase):

    def _dados(self, **extra):
        dados = {"fornecedor_id": 1, "plano_conta_id": 2, "descricao": "Compra de estoque"}
        dados.update(extra)
        return dados

    def test_lancamento_valido(self):
        parcelas = gerar_parcelas(3, date(2025, 2, 1), valor_total=300)
        self.assertEqual(validar_lancamento(self._dados(), parcelas, hoje=HOJE), [])

    def test_todas_as_mensagens_na_ordem(self):
        erros = validar_lancamento({"forma_pagamento": "cartao", "descricao": "ab"}, [], hoje=HOJE)
        self.assertEqual(erros, [
            "Fornecedor é obrigatório",
            "Categoria é obrigatória",
            "Descrição deve ter pelo menos 3 caracteres",
            "Deve ter pelo menos 2 parcelas",
            "Tipo de cartão é obrigatório",
        ])

    def test_cartao_com_tipo_informado(self):
        parcelas = gerar_parcelas(2, date(2025, 2, 1), valor_total=300)
        dados = self._dados(forma_pagamento="cartao", tipo_cartao="credito")
        self.assertEqual(validar_lancamento(dados, parcelas, hoje=HOJE), [])

    def test_maximo_de_parcelas(self):
        primeiro = date(2025, 2, 1)
        parcelas = [ParcelaGerada(i + 1, primeiro + timedelta(days=i), Decimal("10")) for i in range(101)]
        self.assertEqual(validar_lancamento(self._dados(), parcelas, hoje=HOJE), ["Máximo de 100 parcelas permitidas"])

    def test_valor_e_data_das_parcelas(self):
        parcelas = [
            ParcelaGerada(1, date(2025, 1, 10), Decimal("100")),
            ParcelaGerada(2, date(2025, 2, 10), Decimal("0")),
        ]
        self.assertEqual(validar_lancamento(self._dados(), parcelas, hoje=HOJE), [
            "Todas as parcelas devem ter valor maior que zero",
            "Datas de vencimento não podem ser no passado",
        ])


class TestLancamentoLoteApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.fornecedor = self.criar_fornecedor()
        self.categoria = self.criar_categoria()

    def _lancamento(self, **extra):
        payload = {
            "fornecedor_id": self.fornecedor["id"],
            "plano_conta_id": self.categoria["id"],
            "descricao": "Compra de estoque",
            "valor_total": "900.00",
            "numero_parcelas": 3,
            "data_primeiro_vencimento": dias(5),
        }
        payload.update(extra)
        return self.post("/api/lancamentos-lote", payload)

    def test_preview_nao_grava(self):
        r = self.post("/api/lancamentos-lote/preview", {
            "valor_total": "1000", "numero_parcelas": 3, "data_primeiro_vencimento": "2025-01-31",
        })
        self.assertEqual(r.status_code, 200, r.text)
        corpo = r.json()
        self.assertEqual([p["valor"] for p in corpo["parcelas"]], [333.33, 333.33, 333.34])
        self.assertEqual(corpo["parcelas"][1]["data_vencimento"], "2025-02-28")
        self.assertEqual(corpo["valor_total"], 1000.0)
        self.assertEqual(self.get("/api/contas-pagar/").json(), [])

    def test_preview_exige_valor(self):
        r = self.post("/api/lancamentos-lote/preview", {"numero_parcelas": 3, "data_primeiro_vencimento": "2025-01-31"})
        self.assertEqual(r.status_code, 422)

    def test_preview_acima_do_maximo(self):
        r = self.post("/api/lancamentos-lote/preview", {
            "valor_total": "1000", "numero_parcelas": 100000, "data_primeiro_vencimento": "2025-01-31",
        })
        self.assertEqual(r.status_code, 400, r.text)
        self.assertEqual(r.json()["details"]["errors"], ["Máximo de 100 parcelas permitidas"])

    def test_lote_acima_do_maximo(self):
        r = self._lancamento(numero_parcelas=100000)
        self.assertEqual(r.status_code, 400, r.text)
        corpo = r.json()
        self.assertFalse(corpo["sucesso"])
        self.assertEqual(corpo["total_parcelas"], 100000)
        self.assertEqual(corpo["erros"], ["Máximo de 100 parcelas permitidas"])
        self.assertEqual(self.get("/api/contas-pagar/").json(), [])

    def test_lote_invalido_nao_grava_nada(self):
        r = self._lancamento(fornecedor_id=None, descricao="ab", numero_parcelas=1)
        self.assertEqual(r.status_code, 400)
        corpo = r.json()
        self.assertFalse(corpo["sucesso"])
        self.assertEqual(corpo["erros"], [
            "Fornecedor é obrigatório",
            "Descrição deve ter pelo menos 3 caracteres",
            "Deve ter pelo menos 2 parcelas",
        ])
        self.assertEqual(self.get("/api/contas-pagar/").json(), [])

    def test_lote_grava_todas_as_parcelas(self):
        r = self._lancamento()
        self.assertEqual(r.status_code, 201, r.text)
        corpo = r.json()
        self.assertTrue(corpo["sucesso"])
        self.assertEqual(len(corpo["contas_criadas"]), 3)

        parcelas = self.get(f"/api/lancamentos-lote/{corpo['lote_id']}").json()
        self.assertEqual([p["descricao"] for p in parcelas], [
            "Compra de estoque (1/3)", "Compra de estoque (2/3)", "Compra de estoque (3/3)",
        ])
        self.assertTrue(all(p["total_parcelas"] == 3 and p["status"] == "pendente" for p in parcelas))
        self.assertEqual(sum(p["valor_final"] for p in parcelas), 900.0)

    def test_parcelas_informadas_manualmente(self):
        r = self._lancamento(parcelas=[
            {"numero": 1, "data_vencimento": dias(3), "valor": "100.00"},
            {"numero": 2, "data_vencimento": dias(33), "valor": "150.00"},
        ])
        self.assertEqual(r.status_code, 201, r.text)
        parcelas = self.get(f"/api/lancamentos-lote/{r.json()['lote_id']}").json()
        self.assertEqual([p["valor_final"] for p in parcelas], [100.0, 150.0])

    def test_cancelar_lote_preserva_parcelas_pagas(self):
        lote = self._lancamento().json()
        primeira = lote["contas_criadas"][0]
        self.assertEqual(self.post(f"/api/contas-pagar/{primeira}/baixar", {}).status_code, 200)

        r = self.post(f"/api/lancamentos-lote/{lote['lote_id']}/cancelar")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["canceladas"], 2)

        status = [p["status"] for p in self.get(f"/api/lancamentos-lote/{lote['lote_id']}").json()]
        self.assertEqual(status, ["pago", "cancelado", "cancelado"])

    def test_lote_inexistente(self):
        self.assertEqual(self.get("/api/lancamentos-lote/nao-existe").status_code, 404)
        self.assertEqual(self.post("/api/lancamentos-lote/nao-existe/cancelar").status_code, 404)


if __name__ == "__main__":
    unittest.main()
