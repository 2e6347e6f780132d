import unittest
from datetime import date
from decimal import Decimal

from core.errors import ValidationError
from services.contas_service import calcular_valor_final
from tests.base import ApiTestCase, dias


class TestValorFinal(unittest.TestCase):

    def test_desconto_e_acrescimo(self):
        self.assertEqual(calcular_valor_final("1000", "100", "25.50"), Decimal("925.50"))
        self.assertEqual(calcular_valor_final(300, None, None), Decimal("300.00"))

    def test_desconto_maior_que_o_valor(self):
        with self.assertRaises(ValidationError) as ctx:
            calcular_valor_final(100, 150)
        self.assertEqual(ctx.exception.errors, ["Desconto não pode ser maior que o valor da conta"])


class TestContasPagarApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.banco = self.criar_banco()
        self.fornecedor = self.criar_fornecedor()

    def test_criar_calcula_valor_final(self):
        conta = self.criar_conta_pagar(valor_original="1000.00", desconto="100", acrescimo="25.50")
        self.assertEqual(conta["valor_final"], 925.5)
        self.assertEqual(conta["status"], "pendente")

    def test_formulario_invalido(self):
        r = self.post("/api/contas-pagar/", {"descricao": "ab", "valor_original": "0", "data_vencimento": dias(-1)})
        self.assertEqual(r.status_code, 400)
        corpo = r.json()
        self.assertEqual(corpo["code"], "VALIDATION_ERROR")
        self.assertEqual(corpo["details"]["errors"], [
            "Descrição deve ter pelo menos 3 caracteres",
            "Valor deve ser maior que zero",
            "Data de vencimento não pode ser anterior à data atual para novas contas",
        ])

    def test_desconto_maior_que_valor(self):
        r = self.post("/api/contas-pagar/", {
            "descricao": "Energia", "valor_original": "100", "desconto": "150", "data_vencimento": dias(5),
        })
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["details"]["errors"], ["Desconto não pode ser maior que o valor da conta"])

    def test_referencia_de_outro_usuario(self):
        token = self.registrar("bruno@empresa.com.br", "Bruno")["access_token"]
        r = self.client.post("/api/contas-pagar/", headers={"Authorization": f"Bearer {token}"}, json={
            "descricao": "Aluguel", "valor_original": "100", "data_vencimento": dias(5),
            "fornecedor_id": self.fornecedor["id"],
        })
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["detail"], "Fornecedor não encontrado(a)")

    def test_baixar_e_estornar_movimentam_o_banco(self):
        conta = self.criar_conta_pagar(fornecedor_id=self.fornecedor["id"])
        url = f"/api/contas-pagar/{conta['id']}"

        r = self.post(f"{url}/baixar", {"banco_id": self.banco["id"]})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["status"], "pago")
        self.assertEqual(r.json()["valor_pago"], 1500.0)
        self.assertEqual(r.json()["data_pagamento"], date.today().isoformat())
        self.assertEqual(self.saldo_banco(self.banco["id"]), 3500.0)

        fornecedor = self.get(f"/api/fornecedores/{self.fornecedor['id']}").json()
        self.assertEqual(fornecedor["total_compras"], 1)
        self.assertEqual(fornecedor["valor_total"], 1500.0)
        self.assertEqual(fornecedor["ultima_compra"], date.today().isoformat())

        r = self.post(f"{url}/baixar", {"banco_id": self.banco["id"]})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "BUSINESS_RULE_VIOLATION")

        r = self.post(f"{url}/estornar")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["status"], "pendente")
        self.assertIsNone(r.json()["valor_pago"])
        self.assertEqual(self.saldo_banco(self.banco["id"]), 5000.0)
        self.assertEqual(self.get(f"/api/fornecedores/{self.fornecedor['id']}").json()["total_compras"], 0)

        self.assertEqual(self.post(f"{url}/estornar").status_code, 400)

    def test_baixa_com_valor_e_data_informados(self):
        conta = self.criar_conta_pagar(banco_id=self.banco["id"])
        r = self.post(f"/api/contas-pagar/{conta['id']}/baixar", {
            "valor_pago": "1450.00", "data_pagamento": dias(-1), "observacoes": "Pago com desconto",
        })
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["valor_pago"], 1450.0)
        self.assertEqual(r.json()["data_pagamento"], dias(-1))
        self.assertEqual(self.saldo_banco(self.banco["id"]), 3550.0)

    def test_cancelamento(self):
        conta = self.criar_conta_pagar()
        url = f"/api/contas-pagar/{conta['id']}"

        r = self.post(f"{url}/cancelar", {"motivo": "Contrato encerrado"})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["status"], "cancelado")
        self.assertEqual(r.json()["observacoes"], "Contrato encerrado")

        self.assertEqual(self.post(f"{url}/cancelar", {}).status_code, 400)
        self.assertEqual(self.post(f"{url}/baixar", {}).status_code, 400)
        self.assertEqual(self.put(url, {"descricao": "Outra descrição"}).status_code, 400)

    def test_conta_paga_nao_pode_ser_cancelada_nem_alterada(self):
        conta = self.criar_conta_pagar()
        url = f"/api/contas-pagar/{conta['id']}"
        self.post(f"{url}/baixar", {})
        self.assertEqual(self.post(f"{url}/cancelar", {}).status_code, 400)
        self.assertEqual(self.put(url, {"valor_original": "10"}).status_code, 400)

    def test_atualizar_recalcula_valor_final(self):
        conta = self.criar_conta_pagar(valor_original="1000.00")
        r = self.put(f"/api/contas-pagar/{conta['id']}", {"acrescimo": "50"})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["valor_final"], 1050.0)

    def test_exclusao(self):
        paga = self.criar_conta_pagar()
        self.post(f"/api/contas-pagar/{paga['id']}/baixar", {})
        r = self.delete(f"/api/contas-pagar/{paga['id']}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"], "Estorne a conta antes de excluí-la")

        aberta = self.criar_conta_pagar(descricao="Internet")
        self.assertEqual(self.delete(f"/api/contas-pagar/{aberta['id']}").status_code, 204)
        self.assertEqual(self.get(f"/api/contas-pagar/{aberta['id']}").status_code, 404)
        self.assertEqual([c["id"] for c in self.get("/api/contas-pagar/").json()], [paga["id"]])

    def test_marcar_vencidas(self):
        conta = self.criar_conta_pagar(data_vencimento=dias(5))
        self.criar_conta_pagar(descricao="Energia", data_vencimento=dias(5))
        r = self.put(f"/api/contas-pagar/{conta['id']}", {"data_vencimento": dias(-2)})
        self.assertEqual(r.status_code, 200, r.text)

        vencidas = self.get("/api/contas-pagar/", params={"status": "vencido"}).json()
        self.assertEqual([c["id"] for c in vencidas], [conta["id"]])

        self.assertEqual(self.post("/api/contas-pagar/marcar-vencidas").json(), {"atualizadas": 1})
        self.assertEqual(self.get(f"/api/contas-pagar/{conta['id']}").json()["status"], "vencido")
        self.assertEqual(self.post("/api/contas-pagar/marcar-vencidas").json(), {"atualizadas": 0})

        r = self.post(f"/api/contas-pagar/{conta['id']}/cancelar", {})
        self.assertEqual(r.json()["status"], "cancelado")

    def test_resumo(self):
        self.criar_conta_pagar(valor_original="1000.00", data_vencimento=dias(3))
        self.criar_conta_pagar(valor_original="500.00", data_vencimento=dias(20))
        paga = self.criar_conta_pagar(valor_original="200.00")
        self.post(f"/api/contas-pagar/{paga['id']}/baixar", {})
        cancelada = self.criar_conta_pagar(valor_original="300.00")
        self.post(f"/api/contas-pagar/{cancelada['id']}/cancelar", {})

        resumo = self.get("/api/contas-pagar/resumo").json()
        self.assertEqual(resumo["total_pendente"], 1500.0)
        self.assertEqual(resumo["total_vencido"], 0.0)
        self.assertEqual(resumo["total_quitado"], 200.0)
        self.assertEqual(resumo["total_cancelado"], 300.0)
        self.assertEqual(resumo["a_vencer_7_dias"], 1000.0)
        self.assertEqual(resumo["quantidade_por_status"], {"pendente": 2, "pago": 1, "cancelado": 1})

    def test_busca_e_periodo(self):
        self.criar_conta_pagar(descricao="Energia elétrica", data_vencimento=dias(3))
        self.criar_conta_pagar(descricao="Aluguel da loja", data_vencimento=dias(40))

        r = self.get("/api/contas-pagar/", params={"busca": "energia"})
        self.assertEqual([c["descricao"] for c in r.json()], ["Energia elétrica"])

        r = self.get("/api/contas-pagar/", params={"data_inicio": dias(30), "data_fim": dias(60)})
        self.assertEqual([c["descricao"] for c in r.json()], ["Aluguel da loja"])

        r = self.get("/api/contas-pagar/", params={"data_inicio": dias(60), "data_fim": dias(30)})
        self.assertEqual(r.status_code, 400)


class TestContasReceberApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.banco = self.criar_banco()
        self.pagador = self.criar_pagador()

    def _criar(self, **dados):
        payload = {"descricao": "Repasse mensal", "valor_original": "800.00", "data_vencimento": dias(7)}
        payload.update(dados)
        return self.post("/api/contas-receber/", payload)

    def test_exige_cliente_ou_pagador(self):
        r = self._criar()
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["details"]["errors"], ["É necessário informar um cliente ou pagador"])

    def test_receber_credita_banco_e_atualiza_pagador(self):
        conta = self._criar(pagador_id=self.pagador["id"], banco_id=self.banco["id"]).json()
        url = f"/api/contas-receber/{conta['id']}"

        r = self.post(f"{url}/baixar", {"data_recebimento": dias(0)})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["status"], "recebido")
        self.assertEqual(r.json()["valor_recebido"], 800.0)
        self.assertEqual(self.saldo_banco(self.banco["id"]), 5800.0)

        pagador = self.get(f"/api/pagadores/{self.pagador['id']}").json()
        self.assertEqual(pagador["total_recebimentos"], 1)
        self.assertEqual(pagador["valor_total"], 800.0)
        self.assertEqual(pagador["ultimo_recebimento"], dias(0))

        estatisticas = self.get("/api/pagadores/estatisticas").json()
        self.assertEqual(estatisticas["total_recebimentos"], 1)
        self.assertEqual(estatisticas["valor_total"], 800.0)

        self.assertEqual(self.post(f"{url}/estornar").status_code, 200)
        self.assertEqual(self.saldo_banco(self.banco["id"]), 5000.0)
        self.assertEqual(self.get(f"/api/pagadores/{self.pagador['id']}").json()["valor_total"], 0.0)

    def test_conta_com_cliente(self):
        cliente = self.criar_cliente()
        r = self._criar(cliente_id=cliente["id"])
        self.assertEqual(r.status_code, 201, r.text)
        self.assertEqual(r.json()["cliente_id"], cliente["id"])

    def test_pagador_com_conta_nao_pode_ser_excluido(self):
        self._criar(pagador_id=self.pagador["id"])
        r = self.delete(f"/api/pagadores/{self.pagador['id']}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "BUSINESS_RULE_VIOLATION")

    def test_resumo_conta_vencida(self):
        conta = self._criar(pagador_id=self.pagador["id"]).json()
        self.put(f"/api/contas-receber/{conta['id']}", {"data_vencimento": dias(-1)})
        resumo = self.get("/api/contas-receber/resumo").json()
        self.assertEqual(resumo["total_vencido"], 800.0)
        self.assertEqual(resumo["quantidade_por_status"], {"vencido": 1})


if __name__ == "__main__":
    unittest.main()
