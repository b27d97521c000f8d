"""Agregation des montants et structure du resultat de calcul.

Les montants ne sont jamais arrondis en cours de somme; l'arrondi a 2
decimales (ROUND_HALF_UP) n'intervient qu'a la presentation.

Les totaux de jours ne comptent que les jours reellement indemnises:
jours_fenetre garde la longueur brute de la fenetre de paiement.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from calculij.config import ReglesIJ
from calculij.indemnites.paliers import EntreeVentilation, VentilationArret

DEUX_DECIMALES = Decimal("0.01")


def _arrondir(montant: Decimal) -> Decimal:
    return montant.quantize(DEUX_DECIMALES, rounding=ROUND_HALF_UP)


def _iso(d: datetime.date | None) -> str | None:
    return d.isoformat() if d is not None else None


@dataclass(frozen=True)
class ResultatArret:
    """Resultat detaille pour un arret (apres fusion)."""

    identifiant: str
    date_debut: datetime.date
    date_fin: datetime.date
    duree: int
    indices_fusionnes: tuple[int, ...] | None
    est_rechute: bool
    rechute_de: str | None
    nouvelle_pathologie: bool
    date_effet: datetime.date | None
    jours_decompte: int
    cumul_jours: int
    debut_paiement: datetime.date | None
    fin_paiement: datetime.date | None
    jours_fenetre: int
    jours_payables: int
    jours_hors_paliers: int
    age_date_effet: int | None
    coefficient: Decimal
    ventilation: tuple[EntreeVentilation, ...]
    montant: Decimal
    motif: str | None = None

    def en_dict(self) -> dict[str, Any]:
        donnees: dict[str, Any] = {
            "identifiant": self.identifiant,
            "date_debut": _iso(self.date_debut),
            "date_fin": _iso(self.date_fin),
            "duree": self.duree,
            "est_rechute": self.est_rechute,
            "rechute_de": self.rechute_de,
            "nouvelle_pathologie": self.nouvelle_pathologie,
            "date_effet": _iso(self.date_effet),
            "jours_decompte": self.jours_decompte,
            "cumul_jours": self.cumul_jours,
            "debut_paiement": _iso(self.debut_paiement),
            "fin_paiement": _iso(self.fin_paiement),
            "jours_fenetre": self.jours_fenetre,
            "jours_payables": self.jours_payables,
            "jours_hors_paliers": self.jours_hors_paliers,
            "age_date_effet": self.age_date_effet,
            "coefficient": str(self.coefficient),
            "ventilation": [
                {
                    "debut": _iso(e.debut),
                    "fin": _iso(e.fin),
                    "jours": e.jours,
                    "annee": e.annee,
                    "palier": e.palier,
                    "taux_base": str(e.taux_base),
                    "taux": str(e.taux),
                    "montant": str(_arrondir(e.montant)),
                    "taux_force": e.taux_force,
                }
                for e in self.ventilation
            ],
            "montant": str(_arrondir(self.montant)),
            "motif": self.motif,
        }
        # Cle absente (et non liste vide) quand aucun arret n'a ete fusionne
        if self.indices_fusionnes is not None:
            donnees["indices_fusionnes"] = list(self.indices_fusionnes)
        return donnees


@dataclass(frozen=True)
class ResultatCalcul:
    """Resultat complet du calcul des indemnites pour un assure."""

    montant_total: Decimal
    total_jours_payables: int
    total_jours_cumules: int
    age_date_calcul: int
    nb_trimestres: int | None
    date_calcul: datetime.date
    arrets: tuple[ResultatArret, ...]
    avertissements: tuple[str, ...] = ()
    dates_fin_periodes: dict[str, datetime.date] | None = field(default=None, hash=False)

    @property
    def montant_total_arrondi(self) -> Decimal:
        return _arrondir(self.montant_total)

    def en_dict(self) -> dict[str, Any]:
        """Structure JSON-compatible (dates ISO, montants en chaines)."""
        return {
            "montant_total": str(self.montant_total_arrondi),
            "total_jours_payables": self.total_jours_payables,
            "total_jours_cumules": self.total_jours_cumules,
            "age_date_calcul": self.age_date_calcul,
            "nb_trimestres": self.nb_trimestres,
            "date_calcul": _iso(self.date_calcul),
            "arrets": [a.en_dict() for a in self.arrets],
            "avertissements": list(self.avertissements),
            "dates_fin_periodes": (
                {cle: _iso(d) for cle, d in self.dates_fin_periodes.items()}
                if self.dates_fin_periodes is not None else None
            ),
        }


def calculer_dates_fin_periodes(
    ventilations: list[VentilationArret],
    cumul_jours_anterieurs: int,
    regles: ReglesIJ,
) -> dict[str, datetime.date] | None:
    """Date de fin theorique de chaque fenetre de palier.

    Calculee a partir de la premiere date d'effet: fin de la fenetre N =
    date d'effet + (borne N - cumul anterieur) - 1 jour. None si aucun
    arret n'ouvre de droits.
    """
    premiere = next((v for v in ventilations if v.age_date_effet is not None), None)
    if premiere is None or premiere.periode.resolu.date_effet is None:
        return None

    date_effet = premiere.periode.resolu.date_effet
    dates: dict[str, datetime.date] = {}
    for numero, fenetre in enumerate(regles.fenetres_pour_age(premiere.age_date_effet), start=1):
        restant = fenetre.jusqu_au_jour - cumul_jours_anterieurs
        if restant <= 0:
            continue
        dates[f"fin_periode_{numero}"] = date_effet + datetime.timedelta(days=restant - 1)
    return dates


def resultat_arret(ventilation: VentilationArret) -> ResultatArret:
    periode = ventilation.periode
    resolu = periode.resolu
    arret = resolu.arret
    return ResultatArret(
        identifiant=resolu.identifiant,
        date_debut=arret.date_debut,
        date_fin=arret.date_fin,
        duree=resolu.duree,
        indices_fusionnes=resolu.groupe.indices_fusionnes,
        est_rechute=resolu.est_rechute,
        rechute_de=resolu.rechute_de,
        nouvelle_pathologie=resolu.nouvelle_pathologie,
        date_effet=resolu.date_effet,
        jours_decompte=resolu.jours_decompte,
        cumul_jours=resolu.cumul_jours,
        debut_paiement=periode.debut_paiement,
        fin_paiement=periode.fin_paiement,
        jours_fenetre=periode.jours_payables,
        jours_payables=ventilation.jours_indemnises,
        jours_hors_paliers=ventilation.jours_hors_paliers,
        age_date_effet=ventilation.age_date_effet,
        coefficient=ventilation.coefficient,
        ventilation=ventilation.entrees,
        montant=ventilation.montant,
        motif=ventilation.motif or periode.motif,
    )


def agreger_montants(
    ventilations: list[VentilationArret],
    *,
    cumul_jours_anterieurs: int,
    age_date_calcul: int,
    nb_trimestres: int | None,
    date_calcul: datetime.date,
    regles: ReglesIJ,
    avertissements: list[str] | None = None,
) -> ResultatCalcul:
    """Somme les montants par arret et au total.

    Returns:
        ResultatCalcul avec le detail par arret, dans l'ordre chronologique.
    """
    arrets = tuple(resultat_arret(v) for v in ventilations)
    montant_total = sum((a.montant for a in arrets), Decimal("0"))
    total_jours = sum(a.jours_payables for a in arrets)

    return ResultatCalcul(
        montant_total=montant_total,
        total_jours_payables=total_jours,
        total_jours_cumules=cumul_jours_anterieurs + total_jours,
        age_date_calcul=age_date_calcul,
        nb_trimestres=nb_trimestres,
        date_calcul=date_calcul,
        arrets=arrets,
        avertissements=tuple(avertissements or ()),
        dates_fin_periodes=calculer_dates_fin_periodes(
            ventilations, cumul_jours_anterieurs, regles,
        ),
    )
