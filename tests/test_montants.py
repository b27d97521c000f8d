"""Tests pour l'agregation des montants, l'arrondi de presentation et en_dict()."""

import datetime
import json
from decimal import Decimal
from pathlib import Path

import pytest

from calculij.indemnites.montants import ResultatCalcul
from calculij.indemnites.moteur import calculer
from calculij.ingestion.taux_csv import charger_table_taux
from calculij.models.arret import Arret, ContexteAssure

D = datetime.date
FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def table():
    return charger_table_taux(FIXTURES_DIR / "taux.csv")


def _resultat_vide(montant: Decimal) -> ResultatCalcul:
    return ResultatCalcul(
        montant_total=montant,
        total_jours_payables=0,
        total_jours_cumules=0,
        age_date_calcul=50,
        nb_trimestres=None,
        date_calcul=D(2024, 12, 31),
        arrets=(),
    )


class TestArrondi:
    def test_arrondi_au_centime_superieur(self) -> None:
        assert _resultat_vide(Decimal("10.005")).montant_total_arrondi == Decimal("10.01")

    def test_arrondi_inferieur(self) -> None:
        assert _resultat_vide(Decimal("10.0049")).montant_total_arrondi == Decimal("10.00")

    def test_total_non_arrondi_en_cours_de_somme(self, table) -> None:
        """Un tiers de taux sur 3 jours: le total brut garde toute sa precision."""
        contexte = ContexteAssure(
            date_naissance=D(1980, 1, 1), classe="A", cumul_jours_anterieurs=100,
            pathologie_anterieure=True, nb_trimestres=10, date_calcul=D(2024, 12, 31),
        )
        resultat = calculer(
            contexte, [Arret(date_debut=D(2024, 3, 1), date_fin=D(2024, 3, 3))], table,
        )
        assert resultat.montant_total == Decimal(3) * (Decimal("110.00") * (Decimal(1) / Decimal(3)))
        assert resultat.montant_total_arrondi == Decimal("110.00")


class TestEnDict:
    def test_structure_json(self, table) -> None:
        contexte = ContexteAssure(
            date_naissance=D(1980, 1, 1), classe="A", cumul_jours_anterieurs=100, date_calcul=D(2025, 6, 30),
        )
        resultat = calculer(
            contexte, [Arret(identifiant="x", date_debut=D(2024, 12, 20), date_fin=D(2025, 1, 10))], table,
        )
        donnees = resultat.en_dict()
        json.dumps(donnees)
        assert donnees["montant_total"] == "2520.00"
        assert donnees["total_jours_payables"] == 22
        assert donnees["total_jours_cumules"] == 122
        arret = donnees["arrets"][0]
        assert arret["date_effet"] == "2024-12-20"
        assert "indices_fusionnes" not in arret
        assert [e["annee"] for e in arret["ventilation"]] == [2024, 2025]

    def test_indices_fusionnes_presents(self, table) -> None:
        contexte = ContexteAssure(
            date_naissance=D(1980, 1, 1), classe="A", cumul_jours_anterieurs=100, date_calcul=D(2025, 6, 30),
        )
        resultat = calculer(
            contexte,
            [
                Arret(date_debut=D(2024, 1, 1), date_fin=D(2024, 1, 5)),
                Arret(date_debut=D(2024, 1, 8), date_fin=D(2024, 1, 31)),
            ],
            table,
        )
        assert resultat.en_dict()["arrets"][0]["indices_fusionnes"] == [0, 1]


class TestDatesFinPeriodes:
    def test_trois_periodes_entre_62_et_69_ans(self, table) -> None:
        contexte = ContexteAssure(
            date_naissance=D(1960, 1, 1), classe="A", cumul_jours_anterieurs=360, date_calcul=D(2024, 12, 31),
        )
        resultat = calculer(contexte, [Arret(date_debut=D(2024, 3, 1), date_fin=D(2024, 3, 10))], table)
        assert resultat.dates_fin_periodes == {
            "fin_periode_1": D(2024, 3, 5),
            "fin_periode_2": D(2025, 3, 5),
            "fin_periode_3": D(2026, 3, 5),
        }

    def test_moins_de_62_ans(self, table) -> None:
        contexte = ContexteAssure(
            date_naissance=D(1980, 1, 1), classe="A", cumul_jours_anterieurs=95, date_calcul=D(2024, 12, 31),
        )
        resultat = calculer(contexte, [Arret(date_debut=D(2024, 3, 1), date_fin=D(2024, 3, 10))], table)
        assert resultat.dates_fin_periodes == {"fin_periode_1": D(2024, 3, 1) + datetime.timedelta(days=999)}

    def test_sans_date_effet(self, table) -> None:
        contexte = ContexteAssure(date_naissance=D(1980, 1, 1), classe="A", date_calcul=D(2024, 12, 31))
        resultat = calculer(contexte, [Arret(date_debut=D(2024, 3, 1), date_fin=D(2024, 3, 10))], table)
        assert resultat.dates_fin_periodes is None
        assert resultat.en_dict()["dates_fin_periodes"] is None
