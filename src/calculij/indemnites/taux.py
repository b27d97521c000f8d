"""Table des taux journaliers (9 taux par periode: classes A/B/C x paliers 1/2/3).

Toutes les valeurs sont en Decimal. La table est construite une fois puis
partagee en lecture seule entre les calculs.

Repli PASS: pour une date posterieure a la derniere annee publiee, le taux est
k x PASS(annee) / 730 x coefficient du palier (k = 1, 2, 3 pour A, B, C).
Une date non couverte a l'interieur de l'historique est une erreur.
"""

from __future__ import annotations

import datetime
from bisect import bisect_right
from dataclasses import dataclass
from decimal import Decimal

from calculij.config import ReglesIJ
from calculij.erreurs import TauxIntrouvable

CLASSES = ("A", "B", "C")
PALIERS = (1, 2, 3)


@dataclass(frozen=True)
class LigneTaux:
    """Taux journaliers applicables du date_debut au date_fin inclus."""

    date_debut: datetime.date
    date_fin: datetime.date
    taux_a1: Decimal
    taux_a2: Decimal
    taux_a3: Decimal
    taux_b1: Decimal
    taux_b2: Decimal
    taux_b3: Decimal
    taux_c1: Decimal
    taux_c2: Decimal
    taux_c3: Decimal

    def __post_init__(self) -> None:
        if self.date_fin < self.date_debut:
            raise ValueError(
                f"Ligne de taux invalide: fin {self.date_fin} avant debut {self.date_debut}"
            )

    def couvre(self, d: datetime.date) -> bool:
        return self.date_debut <= d <= self.date_fin

    def taux(self, classe: str, palier: int) -> Decimal:
        return getattr(self, f"taux_{classe.lower()}{palier}")


@dataclass(frozen=True)
class TauxResolu:
    """Taux trouve pour une date, avec la derniere date ou il reste valable."""

    valeur: Decimal
    valable_jusqu_au: datetime.date
    repli_pass: bool = False


class TableTaux:
    """Table immuable des taux, indexee par date de debut."""

    def __init__(self, lignes: list[LigneTaux], regles: ReglesIJ | None = None):
        ordonnees = sorted(lignes, key=lambda ligne: ligne.date_debut)
        for precedente, suivante in zip(ordonnees, ordonnees[1:]):
            if suivante.date_debut <= precedente.date_fin:
                raise ValueError(
                    f"Lignes de taux qui se chevauchent: {precedente.date_debut}-"
                    f"{precedente.date_fin} et {suivante.date_debut}-{suivante.date_fin}"
                )
        self._lignes: tuple[LigneTaux, ...] = tuple(ordonnees)
        self._debuts = [ligne.date_debut for ligne in self._lignes]
        self._regles = regles or ReglesIJ()

    @property
    def lignes(self) -> tuple[LigneTaux, ...]:
        return self._lignes

    @property
    def debut_repli(self) -> datetime.date | None:
        """1er janvier de la premiere annee sans aucune ligne publiee."""
        if not self._lignes:
            return None
        derniere_annee = max(ligne.date_fin.year for ligne in self._lignes)
        return datetime.date(derniere_annee + 1, 1, 1)

    def ligne_pour(self, d: datetime.date) -> LigneTaux | None:
        """Retourne la ligne couvrant la date, ou None."""
        i = bisect_right(self._debuts, d) - 1
        if i >= 0 and self._lignes[i].couvre(d):
            return self._lignes[i]
        return None

    def resoudre(self, d: datetime.date, classe: str, palier: int) -> TauxResolu:
        """Taux journalier pour une date, une classe et un palier.

        Raises:
            TauxIntrouvable: Date hors historique sans repli possible.
        """
        classe = classe.upper()
        if classe not in CLASSES or palier not in PALIERS:
            raise TauxIntrouvable(f"Classe/palier inconnus: {classe}/{palier}")

        ligne = self.ligne_pour(d)
        if ligne is not None:
            return TauxResolu(valeur=ligne.taux(classe, palier), valable_jusqu_au=ligne.date_fin)

        debut_repli = self.debut_repli
        if debut_repli is None or d < debut_repli:
            raise TauxIntrouvable(
                f"Aucun taux pour le {d} (classe {classe}, palier {palier}): "
                "date non couverte par la table"
            )
        return TauxResolu(
            valeur=self.taux_repli_pass(d.year, classe, palier),
            valable_jusqu_au=datetime.date(d.year, 12, 31),
            repli_pass=True,
        )

    def taux_pour(self, d: datetime.date, classe: str, palier: int) -> Decimal:
        return self.resoudre(d, classe, palier).valeur

    def fin_validite(self, d: datetime.date) -> datetime.date:
        """Dernier jour ou la source de taux de la date d reste la meme."""
        ligne = self.ligne_pour(d)
        if ligne is not None:
            return ligne.date_fin
        return datetime.date(d.year, 12, 31)

    def taux_repli_pass(self, annee: int, classe: str, palier: int) -> Decimal:
        """k x PASS / 730 x coefficient du palier."""
        regles = self._regles
        pass_annee = regles.valeurs_pass.get(annee)
        if pass_annee is None:
            raise TauxIntrouvable(f"Valeur du PASS inconnue pour l'annee {annee}")
        k = regles.multiplicateurs_classe[classe]
        coefficient = regles.coefficients_paliers[palier]
        return k * pass_annee / Decimal(regles.diviseur_pass) * coefficient
