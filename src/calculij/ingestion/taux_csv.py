"""Chargement de la table des taux depuis un fichier CSV.

Format attendu (separateur ';', en-tete obligatoire):
    date_start;date_end;taux_a1;taux_a2;taux_a3;taux_b1;taux_b2;taux_b3;taux_c1;taux_c2;taux_c3
Les taux acceptent la virgule ou le point decimal.
"""

from __future__ import annotations

import csv
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

from calculij.config import ReglesIJ
from calculij.erreurs import DonneesInvalides
from calculij.indemnites.taux import CLASSES, PALIERS, LigneTaux, TableTaux
from calculij.ingestion.normalisation import normaliser_date

logger = logging.getLogger(__name__)

_COLONNES_TAUX = [f"taux_{c.lower()}{p}" for c in CLASSES for p in PALIERS]
_COLONNES_REQUISES = {"date_start", "date_end", *_COLONNES_TAUX}


def _decimal(valeur: str) -> Decimal:
    texte = valeur.strip().replace(",", ".")
    if not texte:
        raise ValueError("taux vide")
    try:
        nombre = Decimal(texte)
    except InvalidOperation as e:
        raise ValueError(f"taux non numerique: {valeur!r}") from e
    if not nombre.is_finite():
        raise ValueError(f"taux non numerique: {valeur!r}")
    return nombre


def lire_lignes_taux(chemin: Path, delimiteur: str = ";") -> list[LigneTaux]:
    """Lit les lignes de taux d'un CSV.

    Les lignes entierement vides sont ignorees; toute autre ligne illisible
    interrompt le chargement.

    Raises:
        FileNotFoundError: Si le fichier n'existe pas.
        DonneesInvalides: Si des colonnes requises manquent ou si une ligne
            est illisible.
    """
    if not chemin.exists():
        raise FileNotFoundError(f"Fichier de taux introuvable: {chemin}")

    lignes: list[LigneTaux] = []
    with open(chemin, encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f, delimiter=delimiteur)
        entete = {col.strip() for col in (reader.fieldnames or [])}
        manquantes = _COLONNES_REQUISES - entete
        if manquantes:
            logger.error("Colonnes requises manquantes dans %s: %s", chemin, sorted(manquantes))
            raise DonneesInvalides(
                f"Colonnes manquantes dans {chemin.name}: {', '.join(sorted(manquantes))}"
            )

        for lineno, row in enumerate(reader, start=2):
            row = {(k or "").strip(): (v or "") for k, v in row.items()}
            if not any(v.strip() for v in row.values()):
                continue
            try:
                date_debut = normaliser_date(row["date_start"])
                date_fin = normaliser_date(row["date_end"])
                if date_debut is None or date_fin is None:
                    raise ValueError("dates de validite manquantes")
                lignes.append(
                    LigneTaux(
                        date_debut=date_debut,
                        date_fin=date_fin,
                        **{col: _decimal(row[col]) for col in _COLONNES_TAUX},
                    )
                )
            except (KeyError, ValueError, DonneesInvalides) as e:
                logger.error("Erreur ligne %d du CSV de taux: %s", lineno, e)
                raise DonneesInvalides(
                    f"Ligne {lineno} illisible dans {chemin.name}: {e}"
                ) from e

    return lignes


def charger_table_taux(
    chemin: Path, regles: ReglesIJ | None = None, delimiteur: str = ";",
) -> TableTaux:
    """Charge un CSV de taux et construit la table immuable."""
    lignes = lire_lignes_taux(chemin, delimiteur=delimiteur)
    logger.info("%d lignes de taux chargees depuis %s", len(lignes), chemin)
    return TableTaux(lignes, regles=regles)
