"""Calcul des jours payables par arret.

Fenetre payable = [date d'effet, min(fin de l'arret, plafond)], ou le
plafond est la date d'attestation (prolongee a la fin du mois a partir du 27)
ou, a defaut, la date du calcul. Une fenetre reduite a un seul jour paie 0
jour sous la regle "exclusif" (configurable).
Le paiement reprend le lendemain du dernier jour deja indemnise
(date_dernier_paiement) lorsque celui-ci tombe dans la fenetre.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass

from calculij.config import ReglesIJ
from calculij.indemnites.date_effet import ArretResolu
from calculij.indemnites.dates import (
    UN_JOUR,
    SegmentAnnuel,
    ajouter_annees,
    decouper_par_annee,
    fin_de_mois,
    jours_inclusifs,
    premier_jour_semestre_suivant,
)
from calculij.models.arret import ContexteAssure

MOTIF_SANS_DATE_EFFET = "pas de date d'effet"
MOTIF_COMPTE = "compte cotisant non a jour"
MOTIF_AGE_LIMITE = "date d'effet au-dela de la limite d'age ({limite})"
MOTIF_HORS_PERIODE = "hors periode de paiement"
MOTIF_POINT_UNIQUE = "fenetre d'un seul jour (regle exclusive)"
MOTIF_DEJA_PAYE = "deja indemnise jusqu'au {date}"


@dataclass(frozen=True)
class PeriodePayable:
    """Fenetre de paiement d'un arret resolu."""

    resolu: ArretResolu
    debut_paiement: datetime.date | None = None
    fin_paiement: datetime.date | None = None
    jours_payables: int = 0
    segments: tuple[SegmentAnnuel, ...] = ()
    plafond: datetime.date | None = None
    motif: str | None = None


def plafond_paiement(
    fin_arret: datetime.date,
    contexte: ContexteAssure,
    date_calcul: datetime.date,
    regles: ReglesIJ,
) -> datetime.date:
    """Derniere date payable pour un arret, avant application de sa fin."""
    attestation = contexte.date_attestation
    if attestation is None:
        return min(fin_arret, date_calcul)
    if attestation.day >= regles.jour_extension_attestation:
        return fin_de_mois(attestation)
    return attestation


def limite_age_paiement(date_naissance: datetime.date, regles: ReglesIJ) -> datetime.date:
    """Premier jour du semestre suivant l'anniversaire de la limite d'age."""
    return premier_jour_semestre_suivant(ajouter_annees(date_naissance, regles.age_limite_paiement))


def calculer_periode(
    resolu: ArretResolu,
    contexte: ContexteAssure,
    regles: ReglesIJ,
    date_calcul: datetime.date,
) -> PeriodePayable:
    arret = resolu.arret
    if resolu.date_effet is None:
        return PeriodePayable(resolu=resolu, motif=resolu.motif or MOTIF_SANS_DATE_EFFET)
    if not arret.compte_a_jour:
        return PeriodePayable(resolu=resolu, motif=MOTIF_COMPTE)

    limite = limite_age_paiement(contexte.date_naissance, regles)
    if resolu.date_effet >= limite:
        return PeriodePayable(resolu=resolu, motif=MOTIF_AGE_LIMITE.format(limite=limite))

    plafond = plafond_paiement(arret.date_fin, contexte, date_calcul, regles)
    debut = resolu.date_effet
    fin = min(arret.date_fin, plafond)

    if debut > fin:
        return PeriodePayable(resolu=resolu, plafond=plafond, motif=MOTIF_HORS_PERIODE)
    if debut == fin and regles.regle_point_unique == "exclusif":
        return PeriodePayable(resolu=resolu, plafond=plafond, motif=MOTIF_POINT_UNIQUE)

    dernier_paiement = contexte.date_dernier_paiement
    if dernier_paiement is not None and dernier_paiement >= debut:
        debut = dernier_paiement + UN_JOUR
        if debut > fin:
            return PeriodePayable(
                resolu=resolu, plafond=plafond, motif=MOTIF_DEJA_PAYE.format(date=dernier_paiement),
            )

    return PeriodePayable(
        resolu=resolu,
        debut_paiement=debut,
        fin_paiement=fin,
        jours_payables=jours_inclusifs(debut, fin),
        segments=tuple(decouper_par_annee(debut, fin)),
        plafond=plafond,
    )


def calculer_jours_payables(
    resolus: list[ArretResolu],
    contexte: ContexteAssure,
    regles: ReglesIJ,
    date_calcul: datetime.date,
) -> list[PeriodePayable]:
    """Calcule la fenetre payable de chaque arret resolu, dans le meme ordre."""
    return [calculer_periode(r, contexte, regles, date_calcul) for r in resolus]
