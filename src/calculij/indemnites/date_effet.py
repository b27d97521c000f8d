"""Resolution des dates d'effet (ouverture des droits) par groupe d'arrets.

Machine a etats sur la suite chronologique des groupes:
- pathologie nouvelle: droits ouverts le jour ou tombe le 90e jour cumule;
- rechute: droits ouverts au 15e jour de l'arret lui-meme, sans tenir compte
  du compteur de 90 jours;
- date d'ouverture forcee: prise telle quelle, sans seuil.

Le compteur cumule et l'indicateur "droits ouverts" sont remis a zero
lorsqu'un arret non-rechute survient apres l'ouverture des droits.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass

from calculij.config import ReglesIJ
from calculij.indemnites.dates import UN_JOUR, ajouter_annees, jours_inclusifs
from calculij.indemnites.fusion import GroupeArrets
from calculij.models.arret import Arret, ContexteAssure

logger = logging.getLogger(__name__)

MOTIF_NON_VALIDE = "arret non valide medicalement"
MOTIF_SEUIL_NON_ATTEINT = "seuil de {seuil} jours non atteint"
MOTIF_RECHUTE_COURTE = "rechute trop courte pour ouvrir les droits"
MOTIF_DATE_FORCEE = "date d'ouverture des droits forcee"


@dataclass(frozen=True)
class ArretResolu:
    """Groupe d'arrets enrichi de sa date d'effet."""

    groupe: GroupeArrets
    duree: int
    cumul_jours: int
    est_rechute: bool
    rechute_de: str | None
    date_effet: datetime.date | None
    jours_decompte: int
    nouvelle_pathologie: bool = False
    motif: str | None = None

    @property
    def arret(self) -> Arret:
        return self.groupe.arret

    @property
    def identifiant(self) -> str:
        return self.groupe.identifiant


def _decompte(debut: datetime.date, date_effet: datetime.date) -> int:
    """Jours non indemnises du debut de l'arret a la veille de la date d'effet."""
    return jours_inclusifs(debut, date_effet - UN_JOUR)


def _reporter(
    date_effet: datetime.date, arret: Arret, est_rechute: bool, regles: ReglesIJ,
) -> datetime.date:
    """Report de la date d'effet pour declaration tardive ou compte mis a jour tardivement."""
    delai = (
        regles.delai_declaration_tardive_rechute if est_rechute
        else regles.delai_declaration_tardive
    )
    reportee = date_effet
    if arret.declaration_excusee is False and arret.date_declaration is not None:
        reportee = max(reportee, arret.date_declaration + datetime.timedelta(days=delai))
    if arret.date_maj_compte is not None:
        reportee = max(reportee, arret.date_maj_compte + datetime.timedelta(days=delai))
    if reportee != date_effet:
        logger.info(
            "Arret %s: date d'effet reportee du %s au %s", arret.identifiant, date_effet, reportee,
        )
    return reportee


def _dans_delai_rechute(
    arret: Arret, precedent: GroupeArrets, regles: ReglesIJ,
) -> bool:
    limite = ajouter_annees(precedent.arret.date_fin, regles.delai_rechute_annees) - UN_JOUR
    return arret.date_debut <= limite


def resoudre_dates_effet(
    groupes: list[GroupeArrets],
    contexte: ContexteAssure,
    regles: ReglesIJ | None = None,
) -> tuple[list[ArretResolu], list[str]]:
    """Determine la date d'effet et le decompte de chaque groupe.

    Args:
        groupes: Groupes issus de la fusion, dans l'ordre chronologique.
        contexte: Contexte de l'assure (cumul de jours anterieurs).
        regles: Regles metier (defaut: valeurs en vigueur).

    Returns:
        Tuple (arrets resolus dans le meme ordre, avertissements).
    """
    regles = regles or ReglesIJ()
    resolus: list[ArretResolu] = []
    avertissements: list[str] = []

    cumul = contexte.cumul_jours_anterieurs
    droits_ouverts = False
    precedent: GroupeArrets | None = None
    dernier_avec_effet: str | None = None

    for groupe in groupes:
        arret = groupe.arret
        duree = arret.duree

        if not arret.valide_medicalement:
            resolus.append(
                ArretResolu(
                    groupe=groupe,
                    duree=duree,
                    cumul_jours=cumul,
                    est_rechute=False,
                    rechute_de=None,
                    date_effet=None,
                    jours_decompte=duree,
                    motif=MOTIF_NON_VALIDE,
                )
            )
            continue

        # Qualification rechute / nouvelle pathologie
        if arret.rechute is True:
            est_rechute = precedent is not None
            if precedent is None:
                message = (
                    f"Arret {groupe.identifiant}: rechute sans arret precedent, "
                    "traitee comme une nouvelle pathologie"
                )
                logger.warning(message)
                avertissements.append(message)
        elif arret.rechute is False:
            est_rechute = False
        else:
            est_rechute = (
                droits_ouverts
                and precedent is not None
                and _dans_delai_rechute(arret, precedent, regles)
            )

        nouvelle_pathologie = False
        if not est_rechute and droits_ouverts:
            logger.info("Arret %s: nouvelle pathologie, compteurs remis a zero", groupe.identifiant)
            cumul = 0
            droits_ouverts = False
            nouvelle_pathologie = True

        rechute_de = None
        if est_rechute:
            rechute_de = dernier_avec_effet or (precedent.identifiant if precedent else None)

        cumul_avant = cumul
        cumul += duree
        motif = None

        if arret.date_deb_droit is not None:
            date_effet: datetime.date | None = arret.date_deb_droit
            motif = MOTIF_DATE_FORCEE
        elif est_rechute:
            quinzieme_jour = arret.date_debut + datetime.timedelta(days=regles.seuil_rechute - 1)
            if quinzieme_jour <= arret.date_fin:
                date_effet = _reporter(quinzieme_jour, arret, True, regles)
            else:
                date_effet = None
                motif = MOTIF_RECHUTE_COURTE
        else:
            seuil = regles.seuil_nouvelle_pathologie
            if cumul >= seuil:
                decalage = max(0, seuil - cumul_avant - 1)
                date_effet = _reporter(
                    arret.date_debut + datetime.timedelta(days=decalage), arret, False, regles,
                )
            else:
                date_effet = None
                motif = MOTIF_SEUIL_NON_ATTEINT.format(seuil=seuil)

        if date_effet is not None:
            jours_decompte = min(duree, _decompte(arret.date_debut, date_effet))
            droits_ouverts = True
            dernier_avec_effet = groupe.identifiant
        elif est_rechute:
            jours_decompte = 0
        else:
            jours_decompte = duree

        logger.debug(
            "Arret %s: rechute=%s, cumul=%d, date d'effet=%s, decompte=%d",
            groupe.identifiant, est_rechute, cumul, date_effet, jours_decompte,
        )
        resolus.append(
            ArretResolu(
                groupe=groupe,
                duree=duree,
                cumul_jours=cumul,
                est_rechute=est_rechute,
                rechute_de=rechute_de,
                date_effet=date_effet,
                jours_decompte=jours_decompte,
                nouvelle_pathologie=nouvelle_pathologie,
                motif=motif,
            )
        )
        precedent = groupe

    return resolus, avertissements
