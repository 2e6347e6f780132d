import unittest
from datetime import date, datetime
from decimal import Decimal

from tools.formatacao import (
    aplicar_mascara_moeda,
    arredondar,
    converter_moeda_para_numero,
    formatar_data,
    formatar_data_extenso,
    formatar_data_hora,
    formatar_moeda,
    formatar_numero,
    formatar_porcentagem,
    mascara_cep,
    mascara_cnpj,
    mascara_cpf,
    mascara_documento,
    mascara_telefone,
    rotulo_mes,
)


class TestMoeda(unittest.TestCase):

    def test_arredondamento_meio_para_cima(self):
        self.assertEqual(arredondar("2.675"), Decimal("2.68"))
        self.assertEqual(arredondar(0.125), Decimal("0.13"))
        self.assertEqual(arredondar("-1.005"), Decimal("-1.01"))

    def test_formatar_moeda(self):
        self.assertEqual(formatar_moeda(1234.56), "R$ 1.234,56")
        self.assertEqual(formatar_moeda(Decimal("1000000")), "R$ 1.000.000,00")
        self.assertEqual(formatar_moeda(-89.9), "-R$ 89,90")
        self.assertEqual(formatar_moeda(0), "R$ 0,00")

    def test_formatar_moeda_entrada_invalida(self):
        self.assertEqual(formatar_moeda(None), "R$ 0,00")
        self.assertEqual(formatar_moeda("abc"), "R$ 0,00")

    def test_mascara_de_digitacao(self):
        self.assertEqual(aplicar_mascara_moeda("123456"), "R$ 1.234,56")
        self.assertEqual(aplicar_mascara_moeda("5"), "R$ 0,05")
        self.assertEqual(aplicar_mascara_moeda(""), "")

    def test_converter_moeda_para_numero(self):
        self.assertEqual(converter_moeda_para_numero("R$ 1.234,56"), Decimal("1234.56"))
        self.assertEqual(converter_moeda_para_numero("-R$ 10,00"), Decimal("-10.00"))
        self.assertEqual(converter_moeda_para_numero("texto"), Decimal("0"))
        self.assertEqual(converter_moeda_para_numero(None), Decimal("0"))


class TestNumerosEDatas(unittest.TestCase):

    def test_numero_e_porcentagem(self):
        self.assertEqual(formatar_numero(1234.5), "1.234,50")
        self.assertEqual(formatar_numero(-0.5, 1), "-0,5")
        self.assertEqual(formatar_porcentagem(12.346), "12,35%")

    def test_datas(self):
        self.assertEqual(formatar_data(date(2025, 1, 6)), "06/01/2025")
        self.assertEqual(formatar_data("2025-01-06"), "06/01/2025")
        self.assertEqual(formatar_data("invalida"), "")
        self.assertEqual(formatar_data_hora(datetime(2025, 1, 6, 14, 5)), "06/01/2025 14:05")

    def test_data_por_extenso(self):
        self.assertEqual(formatar_data_extenso(date(2025, 1, 6)), "segunda-feira, 6 de janeiro de 2025")
        self.assertEqual(formatar_data_extenso(date(2025, 3, 1)), "sábado, 1 de março de 2025")

    def test_rotulo_mes(self):
        self.assertEqual(rotulo_mes(2025, 1), "Jan/2025")
        self.assertEqual(rotulo_mes(2024, 12), "Dez/2024")


class TestMascaras(unittest.TestCase):

    def test_cpf_progressivo(self):
        self.assertEqual(mascara_cpf("529"), "529")
        self.assertEqual(mascara_cpf("5299822"), "529.982.2")
        self.assertEqual(mascara_cpf("52998224725"), "529.982.247-25")

    def test_cnpj(self):
        self.assertEqual(mascara_cnpj("11222333000181"), "11.222.333/0001-81")
        self.assertEqual(mascara_cnpj("112223"), "11.222.3")

    def test_documento(self):
        self.assertEqual(mascara_documento("52998224725"), "529.982.247-25")
        self.assertEqual(mascara_documento("11222333000181"), "11.222.333/0001-81")

    def test_telefone_e_cep(self):
        self.assertEqual(mascara_telefone("11987654321"), "(11) 98765-4321")
        self.assertEqual(mascara_telefone("1134567890"), "(11) 3456-7890")
        self.assertEqual(mascara_telefone("11"), "(11")
        self.assertEqual(mascara_cep("01310100"), "01310-100")
        self.assertEqual(mascara_cep("013"), "013")


if __name__ == "__main__":
    unittest.main()
