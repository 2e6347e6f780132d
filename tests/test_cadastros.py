import io
import unittest

import pandas as pd

from services.planodecontas_services import (
    codigo_pai_da_linha,
    codigo_pai_implicito,
    converter_booleano,
    normalizar_tipo_dre,
    preparar_dados_importacao,
)
from tests.base import ApiTestCase, dias

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def planilha(linhas) -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(linhas).to_excel(buffer, index=False)
    return buffer.getvalue()


class TestImportacaoHelpers(unittest.TestCase):

    def test_codigo_pai_implicito(self):
        self.assertEqual(codigo_pai_implicito("3.1.02"), "3.1")
        self.assertEqual(codigo_pai_implicito("3.1"), "3")
        self.assertIsNone(codigo_pai_implicito("3"))

    def test_codigo_pai_da_linha(self):
        self.assertEqual(codigo_pai_da_linha(" 3 "), "3")
        self.assertIsNone(codigo_pai_da_linha(float("nan")))
        self.assertIsNone(codigo_pai_da_linha(None))
        self.assertIsNone(codigo_pai_da_linha("  "))

    def test_pai_vazio_na_planilha(self):
        df = preparar_dados_importacao(pd.DataFrame({
            "codigo": ["3.1", "3"],
            "nome": ["Vendas", "Receitas"],
            "conta_pai": [None, float("nan")],
        }))
        self.assertEqual(list(df["codigo"]), ["3", "3.1"])
        self.assertEqual([codigo_pai_da_linha(p) for p in df["codigo_pai"]], [None, "3"])

    def test_tipo_dre(self):
        self.assertEqual(normalizar_tipo_dre("Receita Financeira"), "receita_financeira")
        self.assertEqual(normalizar_tipo_dre("Deduções"), "deducao")
        self.assertEqual(normalizar_tipo_dre("CMV"), "custo")
        self.assertEqual(normalizar_tipo_dre(None, padrao="receita"), "receita")
        with self.assertRaises(ValueError):
            normalizar_tipo_dre("patrimonio")

    def test_booleano(self):
        self.assertTrue(converter_booleano("Sim"))
        self.assertFalse(converter_booleano("n"))
        self.assertTrue(converter_booleano(None))
        with self.assertRaises(ValueError):
            converter_booleano("talvez")


class TestBancosApi(ApiTestCase):

    def test_criar_com_saldo_inicial(self):
        banco = self.criar_banco(agencia="1234", conta="56789-0", telefone="(11) 98765-4321")
        self.assertEqual(banco["saldo_inicial"], 5000.0)
        self.assertEqual(banco["saldo_atual"], 5000.0)
        self.assertEqual(banco["tipo_conta"], "corrente")
        self.assertEqual(banco["telefone"], "11987654321")
        self.assertTrue(banco["ativo"])

    def test_caixa_sem_agencia_e_conta(self):
        banco = self.criar_banco(nome="Caixa da loja", codigo_banco=None, saldo_inicial=0)
        self.assertIsNone(banco["agencia"])
        self.assertEqual(banco["saldo_atual"], 0.0)

    def test_dados_bancarios_invalidos(self):
        r = self.post("/api/bancos/", {"nome": "Itaú", "agencia": "12", "conta": "12ab"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "VALIDATION_ERROR")
        self.assertIn("Agência deve ter pelo menos 3 caracteres", r.json()["details"]["errors"])

        r = self.post("/api/bancos/", {"nome": "Itaú", "conta": "12345"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["details"]["errors"], ["Agência é obrigatória"])

    def test_atualizar(self):
        banco = self.criar_banco()
        r = self.put(f"/api/bancos/{banco['id']}", {"gerente": "Paulo", "tipo_conta": "poupanca"})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["gerente"], "Paulo")
        self.assertEqual(r.json()["tipo_conta"], "poupanca")
        self.assertEqual(r.json()["saldo_atual"], 5000.0)

        r = self.put(f"/api/bancos/{banco['id']}", {"agencia": "1"})
        self.assertEqual(r.status_code, 400)

    def test_tipo_conta_invalido(self):
        r = self.post("/api/bancos/", {"nome": "Itaú", "tipo_conta": "salario"})
        self.assertEqual(r.status_code, 422)

    def test_nao_encontrado(self):
        r = self.get("/api/bancos/999")
        self.assertEqual(r.status_code, 404)
        self.assertEqual(r.json()["detail"], "Banco não encontrado(a)")

    def test_isolado_por_usuario(self):
        banco = self.criar_banco()
        outro = self.registrar("bruno@empresa.com.br", "Bruno Lima")
        r = self.client.get(f"/api/bancos/{banco['id']}", headers={"Authorization": f"Bearer {outro['access_token']}"})
        self.assertEqual(r.status_code, 404)

    def test_alternar_status_e_filtros(self):
        bb = self.criar_banco()
        self.criar_banco(nome="Nubank", codigo_banco="260", tipo_conta="investimento")
        r = self.patch(f"/api/bancos/{bb['id']}/toggle-status")
        self.assertFalse(r.json()["ativo"])

        nomes = [b["nome"] for b in self.get("/api/bancos/", params={"ativo": True}).json()]
        self.assertEqual(nomes, ["Nubank"])
        nomes = [b["nome"] for b in self.get("/api/bancos/", params={"busca": "brasil"}).json()]
        self.assertEqual(nomes, ["Banco do Brasil"])
        nomes = [b["nome"] for b in self.get("/api/bancos/", params={"tipo_conta": "investimento"}).json()]
        self.assertEqual(nomes, ["Nubank"])

    def test_estatisticas(self):
        bb = self.criar_banco()
        self.criar_banco(nome="Caixa", codigo_banco="104", saldo_inicial="1200.50")
        self.patch(f"/api/bancos/{bb['id']}/toggle-status")

        conta = self.criar_conta_pagar(valor_original="200.00")
        self.post(f"/api/contas-pagar/{conta['id']}/baixar", {"banco_id": bb["id"], "data_pagamento": dias(0)})

        r = self.get("/api/bancos/estatisticas")
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json(), {
            "total_bancos": 2,
            "bancos_ativos": 1,
            "saldo_total": 6000.5,
            "movimentacoes_mes": 1,
            "maior_saldo": 4800.0,
            "menor_saldo": 1200.5,
        })

    def test_exclusao_bloqueada_por_cheque(self):
        banco = self.criar_banco()
        self.post("/api/cheques/", {
            "banco_id": banco["id"], "numero_cheque": "10", "valor": "50.00", "data_emissao": dias(0),
        })
        r = self.delete(f"/api/bancos/{banco['id']}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(
            r.json()["detail"],
            "Banco não pode ser excluído pois possui lançamentos vinculados (1 cheques)",
        )

    def test_excluir(self):
        banco = self.criar_banco()
        self.assertEqual(self.delete(f"/api/bancos/{banco['id']}").status_code, 204)
        self.assertEqual(self.get(f"/api/bancos/{banco['id']}").status_code, 404)


class TestContatosApi(ApiTestCase):

    def test_documento_normalizado(self):
        fornecedor = self.criar_fornecedor(email=" Compras@Alfa.com.br ", estado="sp")
        self.assertEqual(fornecedor["documento"], "11222333000181")
        self.assertEqual(fornecedor["tipo"], "pessoa_juridica")
        self.assertEqual(fornecedor["email"], "compras@alfa.com.br")
        self.assertEqual(fornecedor["estado"], "SP")
        self.assertEqual(fornecedor["total_compras"], 0)

        cliente = self.criar_cliente()
        self.assertEqual(cliente["documento"], "52998224725")
        self.assertEqual(cliente["tipo"], "pessoa_fisica")
        self.assertEqual(cliente["status"], "ativo")

    def test_documento_invalido(self):
        r = self.post("/api/fornecedores/", {"nome": "Beta", "documento": "11.222.333/0001-80"})
        self.assertEqual(r.status_code, 422)
        r = self.post("/api/clientes/", {"nome": "João", "documento": "111.111.111-11"})
        self.assertEqual(r.status_code, 422)

    def test_documento_duplicado(self):
        self.criar_fornecedor()
        r = self.post("/api/fornecedores/", {"nome": "Alfa Filial", "documento": "11222333000181"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["detail"], "Já existe um fornecedor com este documento")

        # o mesmo documento pode existir em outro tipo de cadastro
        r = self.post("/api/pagadores/", {"nome": "Alfa", "documento": "11222333000181", "tipo": "pessoa_juridica"})
        self.assertEqual(r.status_code, 201, r.text)

    def test_atualizar_para_documento_existente(self):
        self.criar_cliente()
        outro = self.criar_cliente(nome="José", documento=None)
        r = self.put(f"/api/clientes/{outro['id']}", {"documento": "52998224725"})
        self.assertEqual(r.status_code, 409)

    def test_estatisticas_fornecedores(self):
        alfa = self.criar_fornecedor()
        self.criar_fornecedor(nome="Autônomo", documento=None, tipo="pessoa_fisica")
        self.patch(f"/api/fornecedores/{alfa['id']}/toggle-status")

        r = self.get("/api/fornecedores/estatisticas")
        self.assertEqual(r.json(), {
            "total": 2, "ativos": 1, "inativos": 1, "pessoa_fisica": 1, "pessoa_juridica": 1,
        })

    def test_estatisticas_pagadores_vazio(self):
        r = self.get("/api/pagadores/estatisticas")
        self.assertEqual(r.json(), {
            "total": 0, "ativos": 0, "inativos": 0, "total_recebimentos": 0, "valor_total": 0.0,
        })

    def test_status_do_cliente(self):
        cliente = self.criar_cliente()
        url = f"/api/clientes/{cliente['id']}"
        self.assertEqual(self.patch(f"{url}/toggle-status").json()["status"], "inativo")
        self.assertEqual(self.patch(f"{url}/toggle-status").json()["status"], "ativo")

        self.put(url, {"status": "bloqueado"})
        self.assertEqual(self.patch(f"{url}/toggle-status").json()["status"], "ativo")

        self.put(url, {"status": "bloqueado"})
        nomes = [c["nome"] for c in self.get("/api/clientes/", params={"ativo": False}).json()]
        self.assertEqual(nomes, ["Maria Oliveira"])

    def test_busca(self):
        self.criar_fornecedor()
        self.criar_fornecedor(nome="Gráfica Beta", documento=None)
        nomes = [f["nome"] for f in self.get("/api/fornecedores/", params={"busca": "1122233"}).json()]
        self.assertEqual(nomes, ["Distribuidora Alfa"])

    def test_exclusao_bloqueada(self):
        fornecedor = self.criar_fornecedor()
        self.criar_conta_pagar(fornecedor_id=fornecedor["id"])
        r = self.delete(f"/api/fornecedores/{fornecedor['id']}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["code"], "BUSINESS_RULE_VIOLATION")

        pagador = self.criar_pagador()
        self.assertEqual(self.delete(f"/api/pagadores/{pagador['id']}").status_code, 204)
        self.assertEqual(self.get(f"/api/pagadores/{pagador['id']}").status_code, 404)


class TestPlanoContasApi(ApiTestCase):

    def test_hierarquia_e_nivel(self):
        pai = self.criar_categoria("4", "Despesas")
        r = self.post("/api/plano-contas/", {"codigo": "4.1", "nome": "Aluguel", "plano_pai_id": pai["id"]})
        self.assertEqual(r.status_code, 201, r.text)
        filho = r.json()
        self.assertEqual(pai["nivel"], 1)
        self.assertEqual(filho["nivel"], 2)

        arvore = self.get("/api/plano-contas/arvore").json()
        self.assertEqual(len(arvore), 1)
        self.assertEqual(arvore[0]["codigo"], "4")
        self.assertEqual([f["codigo"] for f in arvore[0]["filhos"]], ["4.1"])

        r = self.delete(f"/api/plano-contas/{pai['id']}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.json()["detail"], "Categoria possui subcategorias e não pode ser excluída")

        self.assertEqual(self.delete(f"/api/plano-contas/{filho['id']}").status_code, 204)
        self.assertEqual(self.delete(f"/api/plano-contas/{pai['id']}").status_code, 204)

    def test_codigo_duplicado(self):
        self.criar_categoria("1", "Receitas", "receita")
        r = self.post("/api/plano-contas/", {"codigo": "1", "nome": "Outra", "tipo_dre": "receita"})
        self.assertEqual(r.status_code, 409)
        self.assertEqual(r.json()["detail"], "Código 1 já cadastrado no plano de contas")

    def test_ciclo_na_hierarquia(self):
        pai = self.criar_categoria("4", "Despesas")
        filho = self.post("/api/plano-contas/", {
            "codigo": "4.1", "nome": "Aluguel", "plano_pai_id": pai["id"],
        }).json()
        r = self.put(f"/api/plano-contas/{pai['id']}", {"plano_pai_id": filho["id"]})
        self.assertEqual(r.status_code, 400)

        r = self.put(f"/api/plano-contas/{filho['id']}", {"plano_pai_id": None})
        self.assertEqual(r.json()["nivel"], 1)

    def test_mover_categoria_com_subcategorias(self):
        despesas = self.criar_categoria("4", "Despesas")
        grupo = self.criar_categoria("5", "Grupo")
        aluguel = self.post("/api/plano-contas/", {
            "codigo": "4.1", "nome": "Aluguel", "plano_pai_id": despesas["id"],
        }).json()
        self.assertEqual(aluguel["nivel"], 2)

        r = self.put(f"/api/plano-contas/{despesas['id']}", {"plano_pai_id": grupo["id"]})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["nivel"], 2)
        self.assertEqual(self.get(f"/api/plano-contas/{aluguel['id']}").json()["nivel"], 3)

        self.put(f"/api/plano-contas/{despesas['id']}", {"plano_pai_id": None})
        self.assertEqual(self.get(f"/api/plano-contas/{aluguel['id']}").json()["nivel"], 2)

    def test_importar_com_coluna_de_pai(self):
        conteudo = planilha([
            {"codigo": "3", "nome": "Receitas", "tipo_dre": "receita", "conta_pai": None},
            {"codigo": "3.1", "nome": "Vendas", "tipo_dre": "receita", "conta_pai": "3"},
        ])
        r = self.post("/api/plano-contas/importar", files={"file": ("plano.xlsx", conteudo, XLSX)})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["erros"], [])
        self.assertEqual(r.json()["criadas"], 2)

    def test_categoria_em_uso(self):
        categoria = self.criar_categoria()
        self.criar_conta_pagar(plano_conta_id=categoria["id"])
        self.assertEqual(self.delete(f"/api/plano-contas/{categoria['id']}").status_code, 400)

    def test_filtros(self):
        self.criar_categoria("1", "Receitas", "receita")
        desativada = self.criar_categoria("4", "Despesas")
        self.patch(f"/api/plano-contas/{desativada['id']}/toggle-status")

        codigos = [c["codigo"] for c in self.get("/api/plano-contas/", params={"apenas_ativos": True}).json()]
        self.assertEqual(codigos, ["1"])
        codigos = [c["codigo"] for c in self.get("/api/plano-contas/", params={"tipo_dre": "despesa_operacional"}).json()]
        self.assertEqual(codigos, ["4"])

    def test_importar_planilha(self):
        self.criar_categoria("4", "Despesas")
        conteudo = planilha([
            {"Código": "3.1", "Nome": "Vendas de mercadorias", "Tipo DRE": ""},
            {"Código": "3", "Nome": "Receitas", "Tipo DRE": "Receita"},
            {"Código": "4", "Nome": "Despesas", "Tipo DRE": "Despesa"},
            {"Código": "4.2", "Nome": "Energia", "Tipo DRE": ""},
        ])
        r = self.post("/api/plano-contas/importar", files={"file": ("plano.xlsx", conteudo, XLSX)})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json(), {
            "status": "sucesso",
            "total_linhas_arquivo": 4,
            "criadas": 3,
            "ignoradas_duplicadas": 1,
            "erros": [],
        })

        arvore = self.get("/api/plano-contas/arvore").json()
        self.assertEqual([c["codigo"] for c in arvore], ["3", "4"])
        vendas = arvore[0]["filhos"][0]
        self.assertEqual(vendas["codigo"], "3.1")
        self.assertEqual(vendas["tipo_dre"], "receita")
        self.assertEqual(vendas["nivel"], 2)
        self.assertEqual([c["codigo"] for c in arvore[1]["filhos"]], ["4.2"])

    def test_importar_sem_pai(self):
        conteudo = planilha([
            {"codigo": "5", "nome": "Financeiro", "tipo_dre": "despesa financeira"},
            {"codigo": "9.1", "nome": "Órfã", "tipo_dre": "outros"},
        ])
        r = self.post("/api/plano-contas/importar", files={"file": ("plano.xlsx", conteudo, XLSX)})
        self.assertEqual(r.status_code, 200, r.text)
        self.assertEqual(r.json()["status"], "parcial")
        self.assertEqual(r.json()["criadas"], 1)
        self.assertEqual(r.json()["erros"], ["Categoria 9.1: categoria pai 9 não encontrada"])

    def test_importar_sem_colunas_obrigatorias(self):
        conteudo = planilha([{"descricao_livre": "x", "valor": 1}])
        r = self.post("/api/plano-contas/importar", files={"file": ("plano.xlsx", conteudo, XLSX)})
        self.assertEqual(r.status_code, 400)
        self.assertIn("Colunas faltantes", r.json()["detail"])


if __name__ == "__main__":
    unittest.main()
