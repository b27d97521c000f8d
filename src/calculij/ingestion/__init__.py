"""Module ingestion: normalisation des enregistrements externes et chargement des taux."""

from calculij.ingestion.normalisation import (
    normaliser_arret,
    normaliser_arrets,
    normaliser_contexte,
    normaliser_date,
)
from calculij.ingestion.taux_csv import charger_table_taux, lire_lignes_taux

__all__ = [
    "charger_table_taux",
    "lire_lignes_taux",
    "normaliser_arret",
    "normaliser_arrets",
    "normaliser_contexte",
    "normaliser_date",
]
