"""Exceptions du moteur de calcul IJ.

Toute erreur interrompt le calcul complet pour l'assure: il n'y a pas de
resultat partiel.
"""


class ErreurCalculIJ(Exception):
    """Erreur de base du calcul des indemnites journalieres."""


class TauxIntrouvable(ErreurCalculIJ):
    """Aucune ligne de taux ne couvre la date et aucun repli PASS ne s'applique."""


class PlageDatesInvalide(ErreurCalculIJ):
    """Un arret se termine avant sa date de debut."""


class DonneesInvalides(ErreurCalculIJ):
    """Champs obligatoires manquants ou mal formes (dates, classe, statut...)."""
