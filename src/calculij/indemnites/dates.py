"""Arithmetique de dates du calcul IJ.

Jours inclusifs, decoupage par annee civile, trimestres d'affiliation,
age, et calendrier des jours ouvrables (week-ends + jours feries francais).
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from functools import lru_cache

from dateutil.easter import easter
from dateutil.relativedelta import relativedelta

UN_JOUR = datetime.timedelta(days=1)

# (mois, jour)
_FERIES_FIXES = (
    (1, 1),  # Jour de l'an
    (5, 1),  # Fete du travail
    (5, 8),  # Victoire 1945
    (7, 14),  # Fete nationale
    (8, 15),  # Assomption
    (11, 1),  # Toussaint
    (11, 11),  # Armistice
    (12, 25),  # Noel
)


@dataclass(frozen=True)
class SegmentAnnuel:
    """Sous-periode contenue dans une seule annee civile."""

    annee: int
    debut: datetime.date
    fin: datetime.date

    @property
    def jours(self) -> int:
        return jours_inclusifs(self.debut, self.fin)


def jours_inclusifs(debut: datetime.date, fin: datetime.date) -> int:
    """Nombre de jours de debut a fin, bornes incluses; 0 si debut > fin."""
    if debut > fin:
        return 0
    return (fin - debut).days + 1


def decouper_par_annee(debut: datetime.date, fin: datetime.date) -> list[SegmentAnnuel]:
    """Decoupe [debut, fin] en segments contigus par annee civile."""
    segments: list[SegmentAnnuel] = []
    courant = debut
    while courant <= fin:
        fin_segment = min(datetime.date(courant.year, 12, 31), fin)
        segments.append(SegmentAnnuel(annee=courant.year, debut=courant, fin=fin_segment))
        courant = fin_segment + UN_JOUR
    return segments


def trimestre(d: datetime.date) -> int:
    """Numero de trimestre civil (1-4)."""
    return (d.month - 1) // 3 + 1


def calculer_trimestres(affiliation: datetime.date, reference: datetime.date) -> int:
    """Trimestres d'affiliation, trimestre de depart compris meme s'il est entame.

    (annee_ref - annee_aff) * 4 + (trim_ref - trim_aff) + 1, et 0 si
    l'affiliation est posterieure a la date de reference.
    """
    if affiliation > reference:
        return 0
    return (
        (reference.year - affiliation.year) * 4
        + (trimestre(reference) - trimestre(affiliation))
        + 1
    )


def calculer_age(date_naissance: datetime.date, a_la_date: datetime.date) -> int:
    """Age revolu a la date donnee."""
    age = a_la_date.year - date_naissance.year
    if (a_la_date.month, a_la_date.day) < (date_naissance.month, date_naissance.day):
        age -= 1
    return age


def ajouter_annees(d: datetime.date, annees: int) -> datetime.date:
    """Ajoute des annees civiles (29 fevrier -> 28 fevrier)."""
    return d + relativedelta(years=annees)


def fin_de_mois(d: datetime.date) -> datetime.date:
    return d + relativedelta(day=31)


def premier_jour_semestre_suivant(d: datetime.date) -> datetime.date:
    """1er juillet si d est au premier semestre, sinon 1er janvier suivant."""
    if d.month <= 6:
        return datetime.date(d.year, 7, 1)
    return datetime.date(d.year + 1, 1, 1)


@lru_cache(maxsize=64)
def jours_feries_france(annee: int) -> frozenset[datetime.date]:
    """Jours feries legaux en France metropolitaine pour une annee."""
    paques = easter(annee)
    feries = {datetime.date(annee, mois, jour) for mois, jour in _FERIES_FIXES}
    feries.add(paques + datetime.timedelta(days=1))  # Lundi de Paques
    feries.add(paques + datetime.timedelta(days=39))  # Ascension
    feries.add(paques + datetime.timedelta(days=50))  # Lundi de Pentecote
    return frozenset(feries)


@dataclass(frozen=True)
class CalendrierOuvrable:
    """Calendrier des jours ouvrables utilise pour detecter les prolongations."""

    feries_france: bool = True
    feries_supplementaires: frozenset[datetime.date] = field(default_factory=frozenset)

    def est_ferie(self, d: datetime.date) -> bool:
        if d in self.feries_supplementaires:
            return True
        return self.feries_france and d in jours_feries_france(d.year)

    def est_ouvrable(self, d: datetime.date) -> bool:
        return d.weekday() < 5 and not self.est_ferie(d)

    def jour_ouvrable_suivant(self, d: datetime.date) -> datetime.date:
        """Premier jour ouvrable strictement apres d."""
        suivant = d + UN_JOUR
        while not self.est_ouvrable(suivant):
            suivant += UN_JOUR
        return suivant

    def est_jour_ouvrable_suivant(self, a: datetime.date, b: datetime.date) -> bool:
        """True si b est le premier jour ouvrable apres a."""
        return b == self.jour_ouvrable_suivant(a)
