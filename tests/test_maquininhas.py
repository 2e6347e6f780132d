import unittest
from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

from core.errors import BusinessRuleError
from services.maquininha_service import calcular_taxa, casar_recebimentos, data_recebimento_prevista
from tests.base import ApiTestCase
from tools.padroes_maquininha import (
    PADROES_CONHECIDOS,
    detectar_anomalias,
    gerar_recomendacoes,
    identificar_padroes,
    padrao_operadora,
    sugerir_tolerancia_otima,
)


def _vendas(qtd, bandeira="visa", bruto=100.0, liquido=98.5, delay=1):
    inicio = date(2025, 1, 6)
    return [
        {
            "data_venda": inicio + timedelta(days=i),
            "data_recebimento": inicio + timedelta(days=i + delay),
            "bandeira": bandeira,
            "tipo_transacao": "debito",
            "parcelas": 1,
            "valor_bruto": bruto,
            "valor_liquido": liquido,
        }
        for i in range(qtd)
    ]


def _taxa(bandeira, tipo, percentual, parcelas_max=1, fixa="0", ativo=True):
    return SimpleNamespace(
        bandeira=bandeira,
        tipo_transacao=tipo,
        parcelas_max=parcelas_max,
        taxa_percentual=Decimal(percentual),
        taxa_fixa=Decimal(fixa),
        ativo=ativo,
    )


class TestPadroes(unittest.TestCase):

    def test_operadora_desconhecida_usa_rede(self):
        self.assertIs(padrao_operadora("cielo"), PADROES_CONHECIDOS["rede"])
        self.assertIs(padrao_operadora(None), PADROES_CONHECIDOS["rede"])
        self.assertEqual(padrao_operadora("SIPAG")["tolerancia_recomendada"], {"valor": 1.00, "dias": 2})

    def test_pouco_historico_devolve_padrao_conhecido(self):
        padrao = identificar_padroes("rede", _vendas(9))
        self.assertEqual(padrao, PADROES_CONHECIDOS["rede"])
        self.assertIsNot(padrao, PADROES_CONHECIDOS["rede"])

    def test_tolerancia_calculada_pelo_historico(self):
        padrao = identificar_padroes("rede", _vendas(10))
        self.assertEqual(padrao["delay_medio_recebimento"], 1.0)
        self.assertEqual(padrao["variacao_valor_comum"], 1.5)
        self.assertEqual(padrao["tolerancia_recomendada"], {"valor": 1.8, "dias": 2})
        self.assertEqual(padrao["bandeiras_mais_comuns"], ["visa"])

    def test_tolerancia_limitada(self):
        padrao = identificar_padroes("sipag", _vendas(12, liquido=90.0, delay=5))
        self.assertEqual(padrao["tolerancia_recomendada"], {"valor": 2.0, "dias": 3})

    def test_sugerir_tolerancia_otima(self):
        historico = [
            {"tolerancia_valor": 0.5, "tolerancia_dias": 1, "taxa_sucesso": 0.90},
            {"tolerancia_valor": 1.0, "tolerancia_dias": 3, "taxa_sucesso": 0.95},
            {"tolerancia_valor": 2.0, "tolerancia_dias": 0, "taxa_sucesso": 0.50},
        ]
        self.assertEqual(sugerir_tolerancia_otima(historico, "rede"), {"valor": 0.75, "dias": 2})

    def test_sugerir_sem_sucesso_suficiente(self):
        historico = [{"tolerancia_valor": 2.0, "tolerancia_dias": 3, "taxa_sucesso": 0.85}]
        self.assertEqual(sugerir_tolerancia_otima(historico, "sipag"), {"valor": 1.00, "dias": 2})
        self.assertEqual(sugerir_tolerancia_otima([], "rede"), {"valor": 0.75, "dias": 1})


class TestAnomalias(unittest.TestCase):

    def test_sem_vendas(self):
        self.assertEqual(detectar_anomalias([], [{"valor": 10}], "rede"), [])

    def test_volume_divergente(self):
        recebimentos = [{"valor": 197.0}] * 5
        self.assertEqual(
            detectar_anomalias(_vendas(10), recebimentos, "rede"),
            ["Volume divergente: 10 vendas vs 5 recebimentos (50.0% diferença)"],
        )

    def test_delay_e_valor(self):
        anomalias = detectar_anomalias(_vendas(2, delay=4), [{"valor": 98.5}, {"valor": 50.0}], "rede")
        self.assertEqual(anomalias, [
            "Delay anômalo: 4.0 dias vs esperado 1.2 dias",
            "Diferença de valor significativa: R$ 48.50 (24.6%)",
        ])

    def test_bandeira_incomum(self):
        anomalias = detectar_anomalias(_vendas(1, bandeira="Hipercard"), [{"valor": 98.5}], "rede")
        self.assertEqual(anomalias, ["Bandeira incomum predominante: hipercard (esperado: visa, mastercard, elo)"])

    def test_recomendacoes(self):
        base = gerar_recomendacoes(PADROES_CONHECIDOS["rede"], [])
        self.assertEqual(len(base), 3)
        self.assertEqual(base[0], "Use tolerância de R$ 0.75 e 1 dias")

        padrao = identificar_padroes("rede", _vendas(10))
        recomendacoes = gerar_recomendacoes(padrao, ["Delay anômalo"])
        self.assertIn("Anomalias detectadas - revisar manualmente", recomendacoes)
        self.assertEqual(recomendacoes[-1], "Considere negociar taxas menores com a operadora")


class TestCalculoDeTaxa(unittest.TestCase):

    def setUp(self):
        self.maquininha = SimpleNamespace(taxas=[
            _taxa("visa", "debito", "1.5"),
            _taxa("visa", "credito_parcelado", "4.0", parcelas_max=6, fixa="0.50"),
            _taxa("visa", "credito_parcelado", "5.0", parcelas_max=12, fixa="0.50"),
            _taxa("elo", "debito", "2.0", ativo=False),
        ])

    def test_debito(self):
        calculo = calcular_taxa(self.maquininha, "VISA", "debito", 1, "200")
        self.assertEqual(calculo["valor_taxa"], Decimal("3.00"))
        self.assertEqual(calculo["valor_liquido"], Decimal("197.00"))

    def test_faixa_de_parcelas_mais_justa(self):
        self.assertEqual(calcular_taxa(self.maquininha, "visa", "credito_parcelado", 3, 1000)["valor_taxa"], Decimal("40.50"))
        self.assertEqual(calcular_taxa(self.maquininha, "visa", "credito_parcelado", 10, 1000)["valor_taxa"], Decimal("50.50"))

    def test_sem_taxa_configurada(self):
        with self.assertRaises(BusinessRuleError):
            calcular_taxa(self.maquininha, "visa", "credito_parcelado", 13, 1000)
        with self.assertRaises(BusinessRuleError):
            calcular_taxa(self.maquininha, "elo", "debito", 1, 100)

    def test_data_prevista(self):
        self.assertEqual(data_recebimento_prevista(date(2025, 1, 31), "debito"), date(2025, 2, 1))
        self.assertEqual(data_recebimento_prevista(date(2025, 1, 31), "credito_vista"), date(2025, 3, 2))


class TestCasamento(unittest.TestCase):

    def test_prefere_data_mais_proxima(self):
        d1, d2 = date(2025, 1, 10), date(2025, 1, 15)
        resultado = casar_recebimentos(
            {d1: Decimal("100"), d2: Decimal("50")},
            [
                {"id": 1, "data_recebimento": d1 + timedelta(days=1), "valor": Decimal("100.50")},
                {"id": 2, "data_recebimento": d1, "valor": Decimal("99.80")},
                {"id": 3, "data_recebimento": d2, "valor": Decimal("50.00")},
            ],
            Decimal("0.75"),
            1,
        )
        self.assertEqual([r["recebimento_id"] for r in resultado], [2, 3])
        self.assertEqual(resultado[0]["valor_recebido"], Decimal("99.80"))
        self.assertTrue(all(r["status"] == "conciliado" for r in resultado))

    def test_recebimento_usado_uma_vez(self):
        d1 = date(2025, 1, 10)
        resultado = casar_recebimentos(
            {d1: Decimal("100"), d1 + timedelta(days=1): Decimal("100")},
            [{"id": 7, "data_recebimento": d1, "valor": Decimal("100")}],
            Decimal("1"),
            1,
        )
        self.assertEqual([r["status"] for r in resultado], ["conciliado", "divergente"])
        self.assertIsNone(resultado[1]["recebimento_id"])

    def test_fora_da_tolerancia(self):
        d1 = date(2025, 1, 10)
        resultado = casar_recebimentos(
            {d1: Decimal("100")},
            [{"id": 1, "data_recebimento": d1, "valor": Decimal("101.00")}],
            Decimal("0.75"),
            1,
        )
        self.assertEqual(resultado[0]["status"], "divergente")


class TestMaquininhasApi(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.banco = self.criar_banco()
        r = self.post("/api/maquininhas/", {
            "nome": "Rede Loja",
            "operadora": "rede",
            "codigo_estabelecimento": "123456",
            "banco_id": self.banco["id"],
            "taxas": [
                {"bandeira": "visa", "tipo_transacao": "debito", "taxa_percentual": "1.5"},
                {"bandeira": "visa", "tipo_transacao": "credito_vista", "taxa_percentual": "3.0"},
            ],
        })
        self.assertEqual(r.status_code, 201, r.text)
        self.maquininha = r.json()
        self.url = f"/api/maquininhas/{self.maquininha['id']}"

    def _importar_janeiro(self):
        r = self.post(f"{self.url}/vendas/importar", {"vendas": [
            {"nsu": "0001", "data_venda": "2025-01-10", "bandeira": "VISA", "tipo_transacao": "debito", "valor_bruto": "200.00"},
            {"nsu": "0002", "data_venda": "2025-01-10", "bandeira": "visa", "tipo_transacao": "debito", "valor_bruto": "100.00"},
        ]})
        self.assertEqual(r.status_code, 201, r.text)
        r = self.post("/api/maquininhas/recebimentos/importar", {
            "banco_id": self.banco["id"],
            "recebimentos": [{"data_recebimento": "2025-01-11", "valor": "295.50"}],
        })
        self.assertEqual(r.status_code, 201, r.text)

    def test_cadastro_com_taxas(self):
        self.assertEqual(len(self.maquininha["taxas"]), 2)
        self.assertTrue(self.maquininha["ativo"])
        self.assertEqual(len(self.get("/api/maquininhas/").json()), 1)

    def test_banco_de_outro_usuario(self):
        token = self.registrar("bruno@empresa.com.br", "Bruno")["access_token"]
        outro = {"Authorization": f"Bearer {token}"}
        r = self.client.post("/api/maquininhas/", headers=outro, json={
            "nome": "Sipag", "operadora": "sipag", "codigo_estabelecimento": "1", "banco_id": self.banco["id"],
        })
        self.assertEqual(r.status_code, 404)

    def test_calcular_taxa(self):
        r = self.post(f"{self.url}/calcular-taxa", {"bandeira": "Visa", "tipo_transacao": "credito_vista", "valor_bruto": "200"})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["valor_taxa"], 6.0)
        self.assertEqual(r.json()["valor_liquido"], 194.0)

        r = self.post(f"{self.url}/calcular-taxa", {"bandeira": "elo", "tipo_transacao": "debito", "valor_bruto": "200"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "BUSINESS_RULE_VIOLATION")

    def test_importacao_calcula_taxa_e_data_prevista(self):
        r = self.post(f"{self.url}/vendas/importar", {"vendas": [
            {"data_venda": "2025-01-10", "bandeira": "VISA", "tipo_transacao": "debito", "valor_bruto": "200.00"},
            {"data_venda": "2025-01-10", "bandeira": "visa", "tipo_transacao": "credito_vista", "valor_bruto": "100.00"},
            {"data_venda": "2025-01-12", "bandeira": "master", "tipo_transacao": "debito",
             "valor_bruto": "50.00", "valor_taxa": "1.00", "data_recebimento": "2025-01-14"},
        ]})
        self.assertEqual(r.status_code, 201, r.text)
        debito, credito, informada = r.json()
        self.assertEqual(debito["bandeira"], "visa")
        self.assertEqual(debito["data_recebimento"], "2025-01-11")
        self.assertEqual(debito["valor_liquido"], 197.0)
        self.assertEqual(debito["taxa_percentual_cobrada"], 1.5)
        self.assertEqual(debito["periodo_processamento"], "2025-01")
        self.assertEqual(credito["data_recebimento"], "2025-02-09")
        self.assertEqual(informada["valor_liquido"], 49.0)
        self.assertEqual(informada["data_recebimento"], "2025-01-14")

    def test_conciliacao_do_periodo(self):
        self._importar_janeiro()
        r = self.post(f"{self.url}/conciliar", {"periodo": "2025-01"})
        self.assertEqual(r.status_code, 200, r.text)
        conciliacao = r.json()
        self.assertEqual(conciliacao["status"], "ok")
        self.assertEqual(conciliacao["total_vendas"], 300.0)
        self.assertEqual(conciliacao["total_taxas"], 4.5)
        self.assertEqual(conciliacao["total_recebimentos"], 295.5)
        self.assertEqual(conciliacao["diferenca"], 0.0)
        self.assertEqual(conciliacao["detalhes"]["tolerancia_valor"], 0.75)
        self.assertEqual(conciliacao["detalhes"]["tolerancia_dias"], 1)
        self.assertEqual(conciliacao["detalhes"]["taxa_sucesso"], 1.0)

        r = self.post(f"{self.url}/conciliar", {"periodo": "2025-01"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"], "Nenhuma venda pendente para o período 2025-01")

    def test_conciliacao_com_divergencia(self):
        self._importar_janeiro()
        r = self.post(f"{self.url}/conciliar", {"periodo": "2025-01", "tolerancia_valor": "0", "tolerancia_dias": 0})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["status"], "ok")

        self.post(f"{self.url}/vendas/importar", {"vendas": [
            {"data_venda": "2025-02-03", "bandeira": "visa", "tipo_transacao": "debito", "valor_bruto": "80.00"},
        ]})
        r = self.post(f"{self.url}/conciliar", {"periodo": "2025-02"})
        corpo = r.json()
        self.assertEqual(corpo["status"], "divergencia")
        self.assertEqual(corpo["total_recebimentos"], 0.0)
        self.assertEqual(corpo["observacoes"], "1 data(s) sem recebimento correspondente")

    def test_periodo_invalido(self):
        self.assertEqual(self.post(f"{self.url}/conciliar", {"periodo": "jan/2025"}).status_code, 422)

    def test_dashboard_e_relatorio(self):
        self._importar_janeiro()
        self.post(f"{self.url}/conciliar", {"periodo": "2025-01"})

        dashboard = self.get("/api/maquininhas/dashboard").json()
        self.assertEqual(dashboard["maquininhas_ativas"], 1)
        self.assertEqual(dashboard["taxa_conciliacao"], 100.0)
        self.assertEqual(len(dashboard["ultimas_conciliacoes"]), 1)

        relatorio = self.get("/api/maquininhas/relatorio-taxas", params={"periodo": "2025-01"}).json()
        self.assertEqual(relatorio, [{
            "operadora": "rede", "quantidade_vendas": 2, "valor_bruto": 300.0, "valor_taxas": 4.5, "taxa_media": 1.5,
        }])
        self.assertEqual(len(self.get("/api/maquininhas/conciliacoes").json()), 1)

    def test_sugerir_tolerancia(self):
        r = self.post(f"{self.url}/sugerir-tolerancia", {"historico": [
            {"tolerancia_valor": "0.5", "tolerancia_dias": 1, "taxa_sucesso": 0.9},
            {"tolerancia_valor": "1.0", "tolerancia_dias": 3, "taxa_sucesso": 0.95},
        ]})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json(), {"valor": 0.75, "dias": 2})

    def test_sugerir_tolerancia_pelas_conciliacoes_anteriores(self):
        self._importar_janeiro()
        self.post(f"{self.url}/conciliar", {"periodo": "2025-01", "tolerancia_valor": "0.5", "tolerancia_dias": 1})
        r = self.post(f"{self.url}/sugerir-tolerancia", {"historico": []})
        self.assertEqual(r.json(), {"valor": 0.5, "dias": 1})

    def test_analise(self):
        r = self.get(f"{self.url}/analise")
        self.assertEqual(r.status_code, 200, r.text)
        corpo = r.json()
        self.assertEqual(corpo["padroes"]["operadora"], "rede")
        self.assertEqual(corpo["anomalias"], [])
        self.assertEqual(corpo["recomendacoes"][0], "Use tolerância de R$ 0.75 e 1 dias")

    def test_atualizar_substitui_taxas_e_alternar_status(self):
        r = self.put(self.url, {"nome": "Rede Matriz", "taxas": [
            {"bandeira": "elo", "tipo_transacao": "debito", "taxa_percentual": "1.9"},
        ]})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["nome"], "Rede Matriz")
        self.assertEqual([t["bandeira"] for t in r.json()["taxas"]], ["elo"])

        r = self.patch(f"{self.url}/toggle-status")
        self.assertFalse(r.json()["ativo"])
        self.assertEqual(self.get("/api/maquininhas/", params={"ativo": True}).json(), [])

    def test_exclusao(self):
        self._importar_janeiro()
        self.post(f"{self.url}/conciliar", {"periodo": "2025-01"})
        self.assertEqual(self.delete(self.url).status_code, 400)

        r = self.post("/api/maquininhas/", {
            "nome": "Sipag Loja", "operadora": "sipag", "codigo_estabelecimento": "999", "banco_id": self.banco["id"],
        })
        outra = r.json()["id"]
        self.assertEqual(self.delete(f"/api/maquininhas/{outra}").status_code, 204)
        self.assertEqual(self.get(f"/api/maquininhas/{outra}").status_code, 404)


if __name__ == "__main__":
    unittest.main()
