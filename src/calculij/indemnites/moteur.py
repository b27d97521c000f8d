"""Moteur IJ: orchestration de tous les calculs pour un assure.

Enchaine fusion des prolongations (fusion.py), dates d'effet (date_effet.py),
jours payables (jours_payables.py), ventilation par palier (paliers.py) et
agregation (montants.py) pour produire un ResultatCalcul complet.

Chaque etape retourne de nouveaux objets; les entrees ne sont jamais modifiees.
"""

from __future__ import annotations

import datetime
import logging

from calculij.config import ReglesIJ
from calculij.erreurs import DonneesInvalides
from calculij.indemnites.date_effet import resoudre_dates_effet
from calculij.indemnites.dates import CalendrierOuvrable, calculer_age, calculer_trimestres
from calculij.indemnites.fusion import fusionner_prolongations
from calculij.indemnites.jours_payables import calculer_jours_payables
from calculij.indemnites.montants import ResultatCalcul, agreger_montants
from calculij.indemnites.paliers import ventiler_paliers
from calculij.indemnites.taux import TableTaux
from calculij.models.arret import Arret, ContexteAssure

logger = logging.getLogger(__name__)


def calendrier_depuis_regles(regles: ReglesIJ) -> CalendrierOuvrable:
    return CalendrierOuvrable(
        feries_france=regles.jours_feries_france,
        feries_supplementaires=frozenset(regles.jours_feries_supplementaires),
    )


def determiner_trimestres(contexte: ContexteAssure, arrets: list[Arret]) -> int | None:
    """Trimestres d'affiliation a la date du premier arret de la pathologie.

    Sans date d'affiliation, retourne le nombre fourni dans le contexte.
    """
    if contexte.date_affiliation is None:
        return contexte.nb_trimestres
    reference = contexte.date_premier_arret_pathologie or min(a.date_debut for a in arrets)
    return calculer_trimestres(contexte.date_affiliation, reference)


def calculer(
    contexte: ContexteAssure,
    arrets: list[Arret],
    table: TableTaux,
    regles: ReglesIJ | None = None,
) -> ResultatCalcul:
    """Calcule les indemnites journalieres d'un assure.

    Args:
        contexte: Contexte de l'assure (naissance, classe, option...).
        arrets: Arrets de travail, dans n'importe quel ordre.
        table: Table des taux, partagee en lecture seule.
        regles: Regles metier (defaut: valeurs en vigueur).

    Returns:
        ResultatCalcul avec le total, les jours et le detail par arret.

    Raises:
        DonneesInvalides: Liste d'arrets vide.
        TauxIntrouvable: Jour payable sans taux applicable.
    """
    if not arrets:
        raise DonneesInvalides("Aucun arret a calculer")

    regles = regles or ReglesIJ()
    date_calcul = contexte.date_calcul or datetime.date.today()

    groupes = fusionner_prolongations(arrets, calendrier_depuis_regles(regles))
    resolus, avertissements = resoudre_dates_effet(groupes, contexte, regles)
    periodes = calculer_jours_payables(resolus, contexte, regles, date_calcul)

    nb_trimestres = determiner_trimestres(contexte, arrets)
    ventilations = ventiler_paliers(periodes, contexte, table, regles, nb_trimestres)

    resultat = agreger_montants(
        ventilations,
        cumul_jours_anterieurs=contexte.cumul_jours_anterieurs,
        age_date_calcul=calculer_age(contexte.date_naissance, date_calcul),
        nb_trimestres=nb_trimestres,
        date_calcul=date_calcul,
        regles=regles,
        avertissements=avertissements,
    )
    logger.info(
        "Calcul IJ: %d arret(s), %d jour(s) payable(s), total %s",
        len(resultat.arrets), resultat.total_jours_payables, resultat.montant_total_arrondi,
    )
    return resultat
