"""Module indemnites: calcul des indemnites journalieres.

Expose le moteur (calculer), la table des taux et les types de resultat.
"""

from calculij.indemnites.montants import ResultatArret, ResultatCalcul
from calculij.indemnites.moteur import calculer
from calculij.indemnites.paliers import EntreeVentilation
from calculij.indemnites.taux import LigneTaux, TableTaux

__all__ = [
    "EntreeVentilation",
    "LigneTaux",
    "ResultatArret",
    "ResultatCalcul",
    "TableTaux",
    "calculer",
]
