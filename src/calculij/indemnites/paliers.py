"""Ventilation des jours payables par palier, annee et ligne de taux.

Le palier de chaque jour depend de l'age a la date d'effet et de sa position
dans le compteur cumule de jours indemnises de la chaine de pathologie (qui
part de cumul_jours_anterieurs, est partage par les rechutes et remis a zero
a chaque nouvelle pathologie). Les jours au-dela de la derniere fenetre ne
sont pas indemnises, pas plus que ceux d'un assure dont le coefficient de
pathologie anterieure est nul.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from decimal import Decimal

from calculij.config import FenetrePalier, ReglesIJ
from calculij.indemnites.dates import UN_JOUR, calculer_age, jours_inclusifs
from calculij.indemnites.jours_payables import PeriodePayable
from calculij.indemnites.taux import TableTaux, TauxResolu
from calculij.models.arret import ContexteAssure

CENT = Decimal("100")
UN = Decimal("1")

MOTIF_PALIERS_EPUISES = "{jours} jour(s) au-dela du dernier palier, non indemnises"
MOTIF_COEFFICIENT_NUL = "pathologie anterieure: trimestres d'affiliation insuffisants, coefficient nul"


@dataclass(frozen=True)
class EntreeVentilation:
    """Suite de jours contigus a annee, palier et taux identiques."""

    debut: datetime.date
    fin: datetime.date
    jours: int
    annee: int
    palier: int
    taux_base: Decimal
    coefficient: Decimal
    taux: Decimal
    montant: Decimal
    taux_force: bool = False


@dataclass(frozen=True)
class VentilationArret:
    """Ventilation complete d'un arret."""

    periode: PeriodePayable
    age_date_effet: int | None = None
    coefficient: Decimal = UN
    entrees: tuple[EntreeVentilation, ...] = ()
    jours_hors_paliers: int = 0
    motif: str | None = None

    @property
    def jours_indemnises(self) -> int:
        return sum(e.jours for e in self.entrees)

    @property
    def montant(self) -> Decimal:
        return sum((e.montant for e in self.entrees), Decimal("0"))


def calculer_montant(jours: int, taux: Decimal, option: int, prorata: Decimal = UN) -> Decimal:
    """jours x taux x option / 100 x prorata, sans arrondi."""
    return Decimal(jours) * taux * Decimal(option) / CENT * prorata


def palier_pour_position(position: int, fenetres: list[FenetrePalier]) -> FenetrePalier | None:
    """Fenetre couvrant le N-ieme jour indemnise, None au-dela de la derniere."""
    for fenetre in fenetres:
        if position <= fenetre.jusqu_au_jour:
            return fenetre
    return None


def ventiler_periode(
    periode: PeriodePayable,
    compteur: int,
    contexte: ContexteAssure,
    table: TableTaux,
    regles: ReglesIJ,
    coefficient: Decimal,
) -> tuple[VentilationArret, int]:
    """Ventile une periode payable a partir du compteur de jours indemnises.

    Avec un taux force (contexte.taux_force), chaque jour indemnise vaut ce
    taux: ni la table, ni le coefficient, ni l'option, ni le prorata ne
    s'appliquent.

    Returns:
        Tuple (ventilation, compteur apres la periode).
    """
    date_effet = periode.resolu.date_effet
    if periode.jours_payables == 0 or date_effet is None:
        return VentilationArret(periode=periode, coefficient=coefficient), compteur

    age = calculer_age(contexte.date_naissance, date_effet)
    if coefficient == 0:
        ventilation = VentilationArret(
            periode=periode, age_date_effet=age, coefficient=coefficient, motif=MOTIF_COEFFICIENT_NUL,
        )
        return ventilation, compteur

    fenetres = regles.fenetres_pour_age(age)
    entrees: list[EntreeVentilation] = []
    jours_hors_paliers = 0

    for segment in periode.segments:
        jour = segment.debut
        while jour <= segment.fin:
            fenetre = palier_pour_position(compteur + 1, fenetres)
            if fenetre is None:
                jours_hors_paliers += jours_inclusifs(jour, segment.fin)
                break

            if contexte.taux_force is not None:
                resolu = TauxResolu(contexte.taux_force, segment.fin, repli_pass=False)
            else:
                resolu = table.resoudre(jour, contexte.classe, fenetre.palier)
            fin_palier = jour + datetime.timedelta(days=fenetre.jusqu_au_jour - compteur - 1)
            fin = min(segment.fin, fin_palier, resolu.valable_jusqu_au)
            jours = jours_inclusifs(jour, fin)

            if contexte.taux_force is not None:
                entree = EntreeVentilation(
                    debut=jour,
                    fin=fin,
                    jours=jours,
                    annee=segment.annee,
                    palier=fenetre.palier,
                    taux_base=contexte.taux_force,
                    coefficient=UN,
                    taux=contexte.taux_force,
                    montant=Decimal(jours) * contexte.taux_force,
                    taux_force=True,
                )
            else:
                taux = resolu.valeur * coefficient
                entree = EntreeVentilation(
                    debut=jour,
                    fin=fin,
                    jours=jours,
                    annee=segment.annee,
                    palier=fenetre.palier,
                    taux_base=resolu.valeur,
                    coefficient=coefficient,
                    taux=taux,
                    montant=calculer_montant(jours, taux, contexte.option, contexte.prorata),
                )
            entrees.append(entree)
            compteur += jours
            jour = fin + UN_JOUR

    ventilation = VentilationArret(
        periode=periode,
        age_date_effet=age,
        coefficient=coefficient,
        entrees=tuple(entrees),
        jours_hors_paliers=jours_hors_paliers,
        motif=MOTIF_PALIERS_EPUISES.format(jours=jours_hors_paliers) if jours_hors_paliers else None,
    )
    return ventilation, compteur


def ventiler_paliers(
    periodes: list[PeriodePayable],
    contexte: ContexteAssure,
    table: TableTaux,
    regles: ReglesIJ,
    nb_trimestres: int | None = None,
) -> list[VentilationArret]:
    """Ventile toutes les periodes payables, dans l'ordre chronologique.

    Args:
        periodes: Periodes issues de calculer_jours_payables.
        contexte: Contexte de l'assure (classe, option, pathologie anterieure).
        table: Table des taux.
        regles: Regles metier.
        nb_trimestres: Trimestres d'affiliation pour le coefficient de
            pathologie anterieure (ignore sans pathologie anterieure).

    Raises:
        TauxIntrouvable: Si un jour payable n'a aucun taux.
    """
    coefficient = Decimal("1")
    if contexte.pathologie_anterieure:
        coefficient = regles.coefficient_pathologie(nb_trimestres or 0)

    compteur = contexte.cumul_jours_anterieurs
    ventilations: list[VentilationArret] = []
    for periode in periodes:
        if periode.resolu.nouvelle_pathologie:
            compteur = 0
        ventilation, compteur = ventiler_periode(
            periode, compteur, contexte, table, regles, coefficient,
        )
        ventilations.append(ventilation)
    return ventilations
