"""Regles metier parametrables du calcul IJ (seuils, paliers, PASS, jours feries).

Les valeurs par defaut reprennent les regles en vigueur; un fichier YAML
(voir regles/ij.yaml) peut les surcharger sans toucher au code.
"""

from __future__ import annotations

import datetime
from decimal import Decimal
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator


class FenetrePalier(BaseModel):
    """Palier applicable jusqu'au N-ieme jour indemnise (cumul inclus)."""

    palier: int = Field(ge=1, le=3, description="1 = taux plein, 2 = reduit, 3 = reduit de second rang")
    jusqu_au_jour: int = Field(gt=0, description="Dernier jour cumule couvert par ce palier")


class FenetresParAge(BaseModel):
    """Fenetres de paliers selon l'age a la date d'effet."""

    moins_62: list[FenetrePalier] = Field(
        default_factory=lambda: [FenetrePalier(palier=1, jusqu_au_jour=1095)]
    )
    de_62_a_69: list[FenetrePalier] = Field(
        default_factory=lambda: [
            FenetrePalier(palier=1, jusqu_au_jour=365),
            FenetrePalier(palier=2, jusqu_au_jour=730),
            FenetrePalier(palier=3, jusqu_au_jour=1095),
        ]
    )
    a_partir_70: list[FenetrePalier] = Field(
        default_factory=lambda: [FenetrePalier(palier=3, jusqu_au_jour=365)]
    )

    @model_validator(mode="after")
    def _verifier_ordre(self) -> FenetresParAge:
        for nom in ("moins_62", "de_62_a_69", "a_partir_70"):
            bornes = [f.jusqu_au_jour for f in getattr(self, nom)]
            if not bornes:
                raise ValueError(f"Aucune fenetre de palier pour '{nom}'")
            if bornes != sorted(set(bornes)):
                raise ValueError(f"Fenetres '{nom}' non strictement croissantes: {bornes}")
        return self


class BandeTrimestres(BaseModel):
    """Coefficient pathologie anterieure pour une plage de trimestres d'affiliation."""

    min_trimestres: int = Field(ge=0)
    max_trimestres: int | None = Field(default=None, description="Borne incluse, None = ouverte")
    numerateur: int = Field(ge=0)
    denominateur: int = Field(default=1, gt=0)

    @property
    def coefficient(self) -> Decimal:
        return Decimal(self.numerateur) / Decimal(self.denominateur)

    def contient(self, nb_trimestres: int) -> bool:
        if nb_trimestres < self.min_trimestres:
            return False
        return self.max_trimestres is None or nb_trimestres <= self.max_trimestres


def _bandes_defaut() -> list[BandeTrimestres]:
    return [
        BandeTrimestres(min_trimestres=0, max_trimestres=7, numerateur=0),
        BandeTrimestres(min_trimestres=8, max_trimestres=15, numerateur=1, denominateur=3),
        BandeTrimestres(min_trimestres=16, max_trimestres=23, numerateur=2, denominateur=3),
        BandeTrimestres(min_trimestres=24, numerateur=1),
    ]


# Plafond annuel de la securite sociale, par annee
_PASS_DEFAUT: dict[int, Decimal] = {
    2015: Decimal("38040"),
    2016: Decimal("38616"),
    2017: Decimal("39228"),
    2018: Decimal("39732"),
    2019: Decimal("40524"),
    2020: Decimal("41136"),
    2021: Decimal("41136"),
    2022: Decimal("41136"),
    2023: Decimal("43992"),
    2024: Decimal("46368"),
    2025: Decimal("47100"),
    2026: Decimal("48060"),
}


class ReglesIJ(BaseModel):
    """Ensemble des constantes metier utilisees par le moteur."""

    seuil_nouvelle_pathologie: int = Field(default=90, gt=0)
    seuil_rechute: int = Field(default=15, gt=0)
    delai_rechute_annees: int = Field(default=1, gt=0)
    delai_declaration_tardive: int = Field(default=30, ge=0)
    delai_declaration_tardive_rechute: int = Field(default=14, ge=0)

    jour_extension_attestation: int = Field(default=27, ge=1, le=31)
    regle_point_unique: Literal["exclusif", "inclusif"] = "exclusif"
    age_limite_paiement: int = Field(default=75, gt=0)

    age_palier_intermediaire: int = 62
    age_palier_senior: int = 70
    fenetres: FenetresParAge = Field(default_factory=FenetresParAge)
    bandes_pathologie_anterieure: list[BandeTrimestres] = Field(default_factory=_bandes_defaut)

    multiplicateurs_classe: dict[str, Decimal] = Field(
        default_factory=lambda: {"A": Decimal("1"), "B": Decimal("2"), "C": Decimal("3")}
    )
    coefficients_paliers: dict[int, Decimal] = Field(
        default_factory=lambda: {1: Decimal("1"), 2: Decimal("0.75"), 3: Decimal("0.5")}
    )
    diviseur_pass: int = Field(default=730, gt=0)
    valeurs_pass: dict[int, Decimal] = Field(default_factory=lambda: dict(_PASS_DEFAUT))

    jours_feries_france: bool = True
    jours_feries_supplementaires: list[datetime.date] = Field(default_factory=list)

    options_par_statut: dict[str, list[int]] = Field(
        default_factory=lambda: {"M": [100], "CCPL": [25, 50], "RSPM": [25, 100]}
    )
    option_par_defaut: dict[str, int] = Field(
        default_factory=lambda: {"M": 100, "CCPL": 25, "RSPM": 25}
    )

    def fenetres_pour_age(self, age: int) -> list[FenetrePalier]:
        """Retourne les fenetres de paliers applicables a l'age donne."""
        if age >= self.age_palier_senior:
            return self.fenetres.a_partir_70
        if age >= self.age_palier_intermediaire:
            return self.fenetres.de_62_a_69
        return self.fenetres.moins_62

    def coefficient_pathologie(self, nb_trimestres: int) -> Decimal:
        """Coefficient applique au taux en cas de pathologie anterieure."""
        for bande in self.bandes_pathologie_anterieure:
            if bande.contient(nb_trimestres):
                return bande.coefficient
        return Decimal("1")


def charger_regles(chemin: Path) -> ReglesIJ:
    """Charge les regles metier depuis un fichier YAML.

    Args:
        chemin: Chemin du fichier YAML.

    Returns:
        Regles validees par Pydantic (valeurs par defaut pour les cles absentes).

    Raises:
        FileNotFoundError: Si le fichier n'existe pas.
        ValueError: Si le YAML ne respecte pas le schema.
    """
    if not chemin.exists():
        raise FileNotFoundError(f"Fichier de regles introuvable: {chemin}")

    donnees = yaml.safe_load(chemin.read_text(encoding="utf-8"))
    if donnees is None:
        return ReglesIJ()

    try:
        return ReglesIJ.model_validate(donnees)
    except Exception as e:
        raise ValueError(f"Fichier de regles invalide ({chemin}): {e}") from e
