"""Normalisation des enregistrements externes vers les modeles canoniques.

Les sources (API JSON, exports de base, fichiers de cas) utilisent des noms de
cles variables ("arret-from-line", "arret_from", "date_debut"...) et des
formats de dates heterogenes. Tout est ramene ici aux champs de Arret et
ContexteAssure avant d'entrer dans le moteur.
"""

from __future__ import annotations

import datetime
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError

from calculij.config import ReglesIJ
from calculij.erreurs import DonneesInvalides
from calculij.models.arret import Arret, ContexteAssure

logger = logging.getLogger(__name__)

_CLES_ARRET: dict[str, str] = {
    "id": "identifiant",
    "arret-from-line": "date_debut",
    "arret_from": "date_debut",
    "arret-to-line": "date_fin",
    "arret_to": "date_fin",
    "rechute-line": "rechute",
    "declaration-date-line": "date_declaration",
    "declaration_date": "date_declaration",
    "dt-line": "declaration_excusee",
    "dt": "declaration_excusee",
    "valid_med_controleur": "valide_medicalement",
    "cco_a_jour": "compte_a_jour",
    "date-effet-forced": "date_deb_droit",
    "date_deb_dr_force": "date_deb_droit",
    "code-patho-line": "code_pathologie",
    "code_patho": "code_pathologie",
}

_CLES_CONTEXTE: dict[str, str] = {
    "birth_date": "date_naissance",
    "date_naissance": "date_naissance",
    "affiliation_date": "date_affiliation",
    "current_date": "date_calcul",
    "attestation_date": "date_attestation",
    "previous_cumul_days": "cumul_jours_anterieurs",
    "patho_anterior": "pathologie_anterieure",
    "first_pathology_stop_date": "date_premier_arret_pathologie",
    "last_payment_date": "date_dernier_paiement",
    "forced_rate": "taux_force",
}

_CHAMPS_DATE_ARRET = ("date_debut", "date_fin", "date_declaration", "date_maj_compte", "date_deb_droit")
_CHAMPS_DATE_CONTEXTE = (
    "date_naissance",
    "date_affiliation",
    "date_calcul",
    "date_attestation",
    "date_premier_arret_pathologie",
    "date_dernier_paiement",
)
_FORMATS_DATE = ("%Y-%m-%d", "%d/%m/%Y", "%Y/%m/%d", "%d-%m-%Y")


def normaliser_date(valeur: Any) -> datetime.date | None:
    """Convertit une valeur de date quelconque en datetime.date.

    Les valeurs vides ("", None, "0000-00-00") donnent None.

    Raises:
        DonneesInvalides: Si la chaine ne correspond a aucun format connu.
    """
    if valeur is None:
        return None
    if isinstance(valeur, datetime.datetime):
        return valeur.date()
    if isinstance(valeur, datetime.date):
        return valeur

    texte = str(valeur).strip()
    if not texte or texte.startswith("0000-00-00"):
        return None
    # Horodatages ISO: on ne garde que la partie date
    texte = texte.split("T")[0].split(" ")[0]
    for fmt in _FORMATS_DATE:
        try:
            return datetime.datetime.strptime(texte, fmt).date()
        except ValueError:
            continue
    raise DonneesInvalides(f"Format de date non reconnu: {valeur!r}")


def _drapeau(valeur: Any) -> bool | None:
    """Interprete un indicateur 0/1, "0"/"1", booleen ou vide."""
    if valeur is None or valeur == "":
        return None
    if isinstance(valeur, bool):
        return valeur
    texte = str(valeur).strip().lower()
    if texte in {"true", "oui", "vrai"}:
        return True
    if texte in {"false", "non", "faux"}:
        return False
    try:
        nombre = Decimal(texte)
    except InvalidOperation as e:
        raise DonneesInvalides(f"Indicateur invalide: {valeur!r}") from e
    if not nombre.is_finite():
        raise DonneesInvalides(f"Indicateur invalide: {valeur!r}")
    return int(nombre) > 0


def _decimal(valeur: Any, champ: str) -> Decimal | None:
    """Convertit un nombre (int, float, "0,5", Decimal) en Decimal fini; vide -> None."""
    if valeur is None or valeur == "":
        return None
    if isinstance(valeur, Decimal):
        nombre = valeur
    else:
        try:
            nombre = Decimal(str(valeur).strip().replace(",", "."))
        except InvalidOperation as e:
            raise DonneesInvalides(f"{champ} invalide: {valeur!r}") from e
    if not nombre.is_finite():
        raise DonneesInvalides(f"{champ} invalide: {valeur!r}")
    return nombre


def _renommer(donnees: dict[str, Any], correspondances: dict[str, str]) -> dict[str, Any]:
    resultat: dict[str, Any] = {}
    for cle, valeur in donnees.items():
        cible = correspondances.get(cle, cle)
        # La cle canonique a priorite sur un alias
        if cible in resultat and cle != cible:
            continue
        resultat[cible] = valeur
    return resultat


def normaliser_arret(donnees: dict[str, Any], position: int = 0) -> Arret:
    """Normalise un enregistrement d'arret brut en Arret valide.

    Args:
        donnees: Enregistrement brut (cles externes ou canoniques).
        position: Position dans la liste, utilisee pour l'identifiant par defaut.

    Raises:
        DonneesInvalides: Dates manquantes ou illisibles.
        PlageDatesInvalide: Fin anterieure au debut.
    """
    champs = _renommer(donnees, _CLES_ARRET)

    for champ in _CHAMPS_DATE_ARRET:
        if champ in champs:
            champs[champ] = normaliser_date(champs[champ])

    for champ in ("date_debut", "date_fin"):
        if champs.get(champ) is None:
            raise DonneesInvalides(f"Arret #{position + 1}: champ requis manquant '{champ}'")

    for champ in ("rechute", "declaration_excusee"):
        if champ in champs:
            champs[champ] = _drapeau(champs[champ])
    for champ in ("valide_medicalement", "compte_a_jour"):
        if champ in champs:
            drapeau = _drapeau(champs[champ])
            champs[champ] = True if drapeau is None else drapeau

    if not champs.get("identifiant"):
        champs["identifiant"] = f"arret-{position + 1}"
    else:
        champs["identifiant"] = str(champs["identifiant"])

    connus = set(Arret.model_fields)
    ignores = sorted(set(champs) - connus)
    if ignores:
        logger.debug("Arret %s: champs ignores %s", champs["identifiant"], ignores)

    try:
        return Arret.model_validate({k: v for k, v in champs.items() if k in connus})
    except ValidationError as e:
        raise DonneesInvalides(f"Arret #{position + 1} invalide: {e}") from e


def normaliser_arrets(enregistrements: list[dict[str, Any]]) -> list[Arret]:
    """Normalise une liste d'arrets bruts.

    Raises:
        DonneesInvalides: Si la liste est vide ou si un arret est invalide.
    """
    if not enregistrements:
        raise DonneesInvalides("La liste d'arrets ne peut pas etre vide")
    return [normaliser_arret(e, i) for i, e in enumerate(enregistrements)]


def normaliser_option(valeur: Any) -> int:
    """Ramene une option a un pourcentage entier.

    Accepte 25, "25", 0.25, "0,25", 1 (= 100 %).
    """
    if isinstance(valeur, Decimal):
        nombre = valeur
    else:
        texte = str(valeur).strip().replace(",", ".").rstrip("%")
        try:
            nombre = Decimal(texte)
        except InvalidOperation as e:
            raise DonneesInvalides(f"Option invalide: {valeur!r}") from e
    if not nombre.is_finite():
        raise DonneesInvalides(f"Option invalide: {valeur!r}")
    if nombre <= 1:
        nombre = nombre * 100
    return int(nombre.to_integral_value())


def corriger_option(statut: str, option: int, regles: ReglesIJ) -> int:
    """Applique les options autorisees par statut (M: 100; CCPL: 25/50; RSPM: 25/100).

    Une option non autorisee est remplacee par l'option par defaut du statut.
    """
    autorisees = regles.options_par_statut.get(statut)
    if not autorisees or option in autorisees:
        return option
    corrigee = regles.option_par_defaut.get(statut, autorisees[0])
    logger.warning(
        "Option corrigee pour le statut %s: %s%% -> %s%%", statut, option, corrigee,
    )
    return corrigee


def normaliser_contexte(donnees: dict[str, Any], regles: ReglesIJ | None = None) -> ContexteAssure:
    """Normalise le contexte brut de l'assure.

    Raises:
        DonneesInvalides: Date de naissance absente, classe/statut invalides.
    """
    regles = regles or ReglesIJ()
    champs = _renommer(donnees, _CLES_CONTEXTE)

    for champ in _CHAMPS_DATE_CONTEXTE:
        if champ in champs:
            champs[champ] = normaliser_date(champs[champ])

    if champs.get("date_naissance") is None:
        raise DonneesInvalides("Champ requis manquant: date_naissance")
    if not champs.get("classe"):
        raise DonneesInvalides("Champ requis manquant: classe")

    champs["classe"] = str(champs["classe"]).strip().upper()
    champs["statut"] = str(champs.get("statut") or "M").strip().upper()

    option = champs.get("option")
    if option is None or option == "":
        option = regles.option_par_defaut.get(champs["statut"], 100)
    champs["option"] = corriger_option(champs["statut"], normaliser_option(option), regles)

    if "pathologie_anterieure" in champs:
        champs["pathologie_anterieure"] = bool(_drapeau(champs["pathologie_anterieure"]))
    for champ in ("prorata", "taux_force"):
        if champ in champs:
            nombre = _decimal(champs[champ], champ)
            if nombre is None:
                del champs[champ]
            else:
                champs[champ] = nombre

    connus = set(ContexteAssure.model_fields)
    try:
        return ContexteAssure.model_validate({k: v for k, v in champs.items() if k in connus})
    except ValidationError as e:
        raise DonneesInvalides(f"Contexte assure invalide: {e}") from e
