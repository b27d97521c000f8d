"""Modeles d'entree du moteur: arret de travail et contexte de l'assure."""

from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from calculij.erreurs import PlageDatesInvalide


def _rejeter_float(v: Any) -> Any:
    """Refuse les float: l'option est un pourcentage entier (25, 50, 100)."""
    if isinstance(v, float):
        raise ValueError(
            "L'option doit etre un entier en pourcentage (25, 50, 100), jamais float. "
            "Passez par normaliser_contexte() pour convertir 0.25 ou '0,25'."
        )
    return v


def _rejeter_float_decimal(v: Any) -> Any:
    """Refuse les float pour les montants et coefficients (Decimal ou str uniquement)."""
    if isinstance(v, float):
        raise ValueError(
            f"Valeur float refusee ({v!r}): utilisez Decimal ou une chaine. "
            "Passez par normaliser_contexte() pour convertir."
        )
    return v


Pourcentage = Annotated[int, BeforeValidator(_rejeter_float)]
ValeurDecimale = Annotated[Decimal, BeforeValidator(_rejeter_float_decimal)]


class Arret(BaseModel):
    """Arret de travail (periode d'incapacite), bornes incluses.

    Les champs derives (date d'effet, decompte, paliers...) ne sont jamais
    stockes ici: chaque etape du calcul produit un nouvel objet enrichi.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "identifiant": "arret-1",
                    "date_debut": "2024-01-01",
                    "date_fin": "2024-01-31",
                    "rechute": None,
                    "date_declaration": "2024-01-03",
                }
            ]
        },
    )

    identifiant: str | None = Field(default=None, description="Identifiant stable de l'arret")
    date_debut: datetime.date
    date_fin: datetime.date
    rechute: bool | None = Field(
        default=None, description="True/False si force par la commission, None = deduit"
    )
    date_declaration: datetime.date | None = None
    declaration_excusee: bool | None = Field(
        default=None, description="False = declaration tardive non excusee (report de la date d'effet)"
    )
    date_maj_compte: datetime.date | None = Field(
        default=None, description="Date de mise a jour du compte cotisant"
    )
    valide_medicalement: bool = True
    compte_a_jour: bool = True
    date_deb_droit: datetime.date | None = Field(
        default=None, description="Date d'ouverture des droits forcee"
    )
    code_pathologie: str | None = None

    @model_validator(mode="after")
    def _verifier_plage(self) -> Arret:
        if self.date_fin < self.date_debut:
            raise PlageDatesInvalide(
                f"Arret {self.identifiant or '?'}: fin {self.date_fin} "
                f"anterieure au debut {self.date_debut}"
            )
        return self

    @property
    def duree(self) -> int:
        """Nombre de jours de l'arret, bornes incluses."""
        return (self.date_fin - self.date_debut).days + 1


class ContexteAssure(BaseModel):
    """Contexte de l'assure pour un calcul (immuable)."""

    model_config = ConfigDict(frozen=True)

    date_naissance: datetime.date
    classe: Literal["A", "B", "C"]
    statut: Literal["M", "CCPL", "RSPM"] = "M"
    option: Pourcentage = Field(default=100, ge=1, le=100, description="Pourcentage de participation")
    date_affiliation: datetime.date | None = None
    date_calcul: datetime.date | None = Field(
        default=None, description="Date du calcul (defaut: aujourd'hui)"
    )
    date_attestation: datetime.date | None = None
    cumul_jours_anterieurs: int = Field(default=0, ge=0)
    pathologie_anterieure: bool = False
    nb_trimestres: int | None = Field(
        default=None, ge=0, description="Utilise si aucune date d'affiliation n'est connue"
    )
    date_premier_arret_pathologie: datetime.date | None = None
    date_dernier_paiement: datetime.date | None = Field(
        default=None, description="Dernier jour deja indemnise; le paiement reprend le lendemain"
    )
    prorata: ValeurDecimale = Field(default=Decimal("1"), gt=0, le=1)
    taux_force: ValeurDecimale | None = Field(
        default=None, gt=0, description="Taux journalier impose, remplace le taux de la table"
    )
