"""Tests pour la table des taux journaliers et le repli PASS."""

import datetime
from decimal import Decimal

import pytest

from calculij.config import ReglesIJ
from calculij.erreurs import TauxIntrouvable
from calculij.indemnites.taux import LigneTaux, TableTaux

D = datetime.date


def _ligne(debut: datetime.date, fin: datetime.date, base: str) -> LigneTaux:
    """Ligne de taux ou chaque classe multiplie la base (A x1, B x2, C x3)."""
    b = Decimal(base)
    return LigneTaux(
        date_debut=debut,
        date_fin=fin,
        taux_a1=b, taux_a2=b * Decimal("0.75"), taux_a3=b / 2,
        taux_b1=b * 2, taux_b2=b * Decimal("1.5"), taux_b3=b,
        taux_c1=b * 3, taux_c2=b * Decimal("2.25"), taux_c3=b * Decimal("1.5"),
    )


@pytest.fixture
def table() -> TableTaux:
    return TableTaux([
        _ligne(D(2024, 1, 1), D(2024, 12, 31), "110"),
        _ligne(D(2023, 1, 1), D(2023, 12, 31), "100"),
    ])


class TestLigneTaux:
    def test_fin_avant_debut(self) -> None:
        with pytest.raises(ValueError):
            _ligne(D(2024, 2, 1), D(2024, 1, 1), "100")

    def test_taux_par_classe_et_palier(self) -> None:
        ligne = _ligne(D(2024, 1, 1), D(2024, 12, 31), "100")
        assert ligne.taux("A", 1) == Decimal("100")
        assert ligne.taux("b", 2) == Decimal("150.0")
        assert ligne.taux("C", 3) == Decimal("150.0")


class TestTableTaux:
    def test_lignes_triees(self, table) -> None:
        assert [ligne.date_debut.year for ligne in table.lignes] == [2023, 2024]

    def test_taux_dans_la_periode(self, table) -> None:
        assert table.taux_pour(D(2024, 6, 15), "A", 1) == Decimal("110")
        assert table.taux_pour(D(2023, 12, 31), "B", 1) == Decimal("200")

    def test_bornes_incluses(self, table) -> None:
        assert table.taux_pour(D(2024, 1, 1), "A", 1) == Decimal("110")
        assert table.taux_pour(D(2024, 12, 31), "A", 1) == Decimal("110")

    def test_chevauchement_refuse(self) -> None:
        with pytest.raises(ValueError, match="chevauchent"):
            TableTaux([
                _ligne(D(2024, 1, 1), D(2024, 6, 30), "100"),
                _ligne(D(2024, 6, 1), D(2024, 12, 31), "110"),
            ])

    def test_avant_historique(self, table) -> None:
        with pytest.raises(TauxIntrouvable):
            table.taux_pour(D(2022, 12, 31), "A", 1)

    def test_trou_dans_historique(self) -> None:
        table = TableTaux([
            _ligne(D(2024, 1, 1), D(2024, 3, 31), "100"),
            _ligne(D(2024, 5, 1), D(2024, 12, 31), "110"),
        ])
        with pytest.raises(TauxIntrouvable):
            table.taux_pour(D(2024, 4, 15), "A", 1)

    def test_table_vide(self) -> None:
        with pytest.raises(TauxIntrouvable):
            TableTaux([]).taux_pour(D(2024, 1, 1), "A", 1)

    def test_classe_inconnue(self, table) -> None:
        with pytest.raises(TauxIntrouvable):
            table.taux_pour(D(2024, 1, 1), "D", 1)

    def test_fin_validite(self, table) -> None:
        assert table.fin_validite(D(2024, 3, 1)) == D(2024, 12, 31)
        assert table.fin_validite(D(2026, 3, 1)) == D(2026, 12, 31)


class TestReplisPASS:
    """Au-dela de la derniere annee publiee: k x PASS / 730 x coefficient palier."""

    def test_debut_repli(self, table) -> None:
        assert table.debut_repli == D(2025, 1, 1)

    def test_classe_a_palier_1(self, table) -> None:
        resolu = table.resoudre(D(2025, 3, 1), "A", 1)
        assert resolu.repli_pass
        assert resolu.valeur == Decimal("1") * Decimal("47100") / Decimal("730") * Decimal("1")
        assert resolu.valable_jusqu_au == D(2025, 12, 31)

    def test_classe_b_palier_2(self, table) -> None:
        attendu = Decimal("2") * Decimal("48060") / Decimal("730") * Decimal("0.75")
        assert table.taux_pour(D(2026, 7, 1), "B", 2) == attendu

    def test_classe_c_palier_3(self, table) -> None:
        attendu = Decimal("3") * Decimal("47100") / Decimal("730") * Decimal("0.5")
        assert table.taux_pour(D(2025, 12, 31), "C", 3) == attendu

    def test_pass_inconnu(self, table) -> None:
        with pytest.raises(TauxIntrouvable, match="PASS"):
            table.taux_pour(D(2030, 1, 1), "A", 1)

    def test_pass_configurable(self) -> None:
        regles = ReglesIJ(valeurs_pass={2025: Decimal("73000")})
        table = TableTaux([_ligne(D(2024, 1, 1), D(2024, 12, 31), "110")], regles=regles)
        assert table.taux_pour(D(2025, 1, 1), "A", 1) == Decimal("100")
