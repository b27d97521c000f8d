"""Tests pour l'arithmetique de dates (jours inclusifs, annees, trimestres, jours ouvrables)."""

import datetime

import pytest

from calculij.indemnites.dates import (
    CalendrierOuvrable,
    ajouter_annees,
    calculer_age,
    calculer_trimestres,
    decouper_par_annee,
    fin_de_mois,
    jours_feries_france,
    jours_inclusifs,
    premier_jour_semestre_suivant,
    trimestre,
)

D = datetime.date


class TestJoursInclusifs:
    def test_meme_jour(self) -> None:
        assert jours_inclusifs(D(2024, 5, 1), D(2024, 5, 1)) == 1

    def test_mois_complet(self) -> None:
        assert jours_inclusifs(D(2024, 1, 1), D(2024, 1, 31)) == 31

    def test_bornes_inversees(self) -> None:
        assert jours_inclusifs(D(2024, 1, 31), D(2024, 1, 1)) == 0

    def test_annee_bissextile(self) -> None:
        assert jours_inclusifs(D(2024, 1, 1), D(2024, 12, 31)) == 366


class TestDecouperParAnnee:
    def test_chevauchement_fin_annee(self) -> None:
        """2024-12-20 -> 2025-01-10: 12 jours en 2024, 10 jours en 2025."""
        segments = decouper_par_annee(D(2024, 12, 20), D(2025, 1, 10))
        assert [(s.annee, s.jours) for s in segments] == [(2024, 12), (2025, 10)]
        assert segments[0].fin == D(2024, 12, 31)
        assert segments[1].debut == D(2025, 1, 1)

    def test_plusieurs_annees(self) -> None:
        segments = decouper_par_annee(D(2023, 6, 1), D(2025, 2, 1))
        assert [s.annee for s in segments] == [2023, 2024, 2025]
        assert segments[1].jours == 366

    @pytest.mark.parametrize(
        "debut,fin",
        [
            (D(2024, 3, 1), D(2024, 3, 1)),
            (D(2024, 12, 31), D(2025, 1, 1)),
            (D(2022, 2, 14), D(2026, 7, 30)),
        ],
    )
    def test_somme_egale_jours_inclusifs(self, debut, fin) -> None:
        segments = decouper_par_annee(debut, fin)
        assert sum(s.jours for s in segments) == jours_inclusifs(debut, fin)

    def test_plage_vide(self) -> None:
        assert decouper_par_annee(D(2024, 2, 1), D(2024, 1, 1)) == []


class TestTrimestres:
    def test_numero_trimestre(self) -> None:
        assert trimestre(D(2024, 2, 10)) == 1
        assert trimestre(D(2024, 6, 30)) == 2
        assert trimestre(D(2024, 7, 1)) == 3
        assert trimestre(D(2024, 12, 31)) == 4

    def test_trimestres_affiliation(self) -> None:
        """(2024 - 2020) x 4 + (1 - 1) + 1 = 17."""
        assert calculer_trimestres(D(2020, 1, 15), D(2024, 3, 1)) == 17

    def test_meme_trimestre(self) -> None:
        assert calculer_trimestres(D(2024, 4, 1), D(2024, 5, 20)) == 1

    def test_affiliation_posterieure(self) -> None:
        assert calculer_trimestres(D(2025, 1, 1), D(2024, 12, 31)) == 0


class TestAge:
    def test_veille_anniversaire(self) -> None:
        assert calculer_age(D(1960, 6, 15), D(2024, 6, 14)) == 63

    def test_jour_anniversaire(self) -> None:
        assert calculer_age(D(1960, 6, 15), D(2024, 6, 15)) == 64

    def test_ajouter_annees_29_fevrier(self) -> None:
        assert ajouter_annees(D(2024, 2, 29), 1) == D(2025, 2, 28)

    def test_fin_de_mois(self) -> None:
        assert fin_de_mois(D(2024, 2, 10)) == D(2024, 2, 29)
        assert fin_de_mois(D(2025, 4, 27)) == D(2025, 4, 30)

    def test_semestre_suivant(self) -> None:
        assert premier_jour_semestre_suivant(D(2024, 3, 10)) == D(2024, 7, 1)
        assert premier_jour_semestre_suivant(D(2024, 9, 1)) == D(2025, 1, 1)


class TestJoursFeries:
    def test_feries_mobiles_2024(self) -> None:
        """Paques 2024 = 31 mars."""
        feries = jours_feries_france(2024)
        assert D(2024, 4, 1) in feries  # Lundi de Paques
        assert D(2024, 5, 9) in feries  # Ascension
        assert D(2024, 5, 20) in feries  # Lundi de Pentecote

    def test_feries_fixes(self) -> None:
        feries = jours_feries_france(2025)
        assert D(2025, 7, 14) in feries
        assert D(2025, 11, 11) in feries
        assert D(2025, 7, 15) not in feries


class TestCalendrierOuvrable:
    @pytest.fixture
    def calendrier(self) -> CalendrierOuvrable:
        return CalendrierOuvrable()

    def test_vendredi_vers_lundi(self, calendrier) -> None:
        assert calendrier.jour_ouvrable_suivant(D(2024, 1, 5)) == D(2024, 1, 8)

    def test_samedi_pas_ouvrable(self, calendrier) -> None:
        assert not calendrier.est_jour_ouvrable_suivant(D(2024, 1, 5), D(2024, 1, 6))
        assert calendrier.est_jour_ouvrable_suivant(D(2024, 1, 5), D(2024, 1, 8))

    def test_saute_lundi_de_paques(self, calendrier) -> None:
        assert calendrier.jour_ouvrable_suivant(D(2024, 3, 29)) == D(2024, 4, 2)

    def test_sans_feries_francais(self) -> None:
        calendrier = CalendrierOuvrable(feries_france=False)
        assert calendrier.jour_ouvrable_suivant(D(2024, 3, 29)) == D(2024, 4, 1)

    def test_feries_supplementaires(self) -> None:
        calendrier = CalendrierOuvrable(feries_supplementaires=frozenset({D(2024, 1, 8)}))
        assert calendrier.jour_ouvrable_suivant(D(2024, 1, 5)) == D(2024, 1, 9)
