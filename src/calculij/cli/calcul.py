"""Commandes CLI du calcul des indemnites journalieres.

Usage:
    cij calculer dossier.yaml --taux taux.csv
    cij calculer dossier.yaml --taux taux.csv --json
    cij taux 2024-06-01 B 2 --taux taux.csv
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table

from calculij.config import ReglesIJ, charger_regles
from calculij.erreurs import DonneesInvalides, ErreurCalculIJ
from calculij.indemnites.montants import ResultatCalcul, _arrondir
from calculij.indemnites.moteur import calculer
from calculij.ingestion.normalisation import normaliser_arrets, normaliser_contexte, normaliser_date
from calculij.ingestion.taux_csv import charger_table_taux

console = Console()


def _regles(regles: Optional[str]) -> ReglesIJ:
    from calculij.cli.app import get_regles_path

    chemin = Path(regles) if regles else get_regles_path()
    if chemin is None:
        return ReglesIJ()
    return charger_regles(chemin)


def lire_dossier(chemin: Path) -> dict[str, Any]:
    """Lit un dossier YAML avec les cles 'assure' et 'arrets'.

    Raises:
        FileNotFoundError: Si le fichier n'existe pas.
        DonneesInvalides: Si la structure est incorrecte.
    """
    if not chemin.exists():
        raise FileNotFoundError(f"Dossier introuvable: {chemin}")
    try:
        donnees = yaml.safe_load(chemin.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise DonneesInvalides(f"YAML invalide ({chemin}): {e}") from e
    if not isinstance(donnees, dict) or "assure" not in donnees or "arrets" not in donnees:
        raise DonneesInvalides(f"Le dossier {chemin.name} doit contenir 'assure' et 'arrets'")
    return donnees


def calculer_cmd(
    dossier: Path = typer.Argument(..., help="Fichier YAML du dossier (assure + arrets)"),
    taux: Path = typer.Option(..., "--taux", "-t", help="Fichier CSV des taux journaliers"),
    regles: Optional[str] = typer.Option(
        None, "--regles", "-r", help="Fichier YAML des regles metier",
    ),
    en_json: bool = typer.Option(False, "--json", help="Sortie JSON au lieu du tableau"),
) -> None:
    """Calculer les indemnites journalieres d'un dossier."""
    try:
        regles_ij = _regles(regles)
        donnees = lire_dossier(dossier)
        contexte = normaliser_contexte(donnees["assure"] or {}, regles_ij)
        arrets = normaliser_arrets(donnees["arrets"] or [])
        table = charger_table_taux(taux, regles_ij)
        resultat = calculer(contexte, arrets, table, regles_ij)
    except (ErreurCalculIJ, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(code=1)

    if en_json:
        typer.echo(json.dumps(resultat.en_dict(), indent=2, ensure_ascii=False))
        return
    _afficher_resultat(resultat)


def taux_cmd(
    date: str = typer.Argument(..., help="Date (AAAA-MM-JJ)"),
    classe: str = typer.Argument(..., help="Classe de cotisation (A, B ou C)"),
    palier: int = typer.Argument(..., help="Palier (1, 2 ou 3)"),
    taux: Path = typer.Option(..., "--taux", "-t", help="Fichier CSV des taux journaliers"),
    regles: Optional[str] = typer.Option(
        None, "--regles", "-r", help="Fichier YAML des regles metier",
    ),
) -> None:
    """Afficher le taux journalier applicable a une date."""
    try:
        regles_ij = _regles(regles)
        jour = normaliser_date(date)
        if jour is None:
            raise DonneesInvalides("Date requise")
        table = charger_table_taux(taux, regles_ij)
        resolu = table.resoudre(jour, classe, palier)
    except (ErreurCalculIJ, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Erreur: {e}[/red]")
        raise typer.Exit(code=1)

    source = "repli PASS" if resolu.repli_pass else "table"
    console.print(
        f"Taux {classe.upper()}{palier} au {jour}: [bold]{resolu.valeur}[/bold] "
        f"({source}, valable jusqu'au {resolu.valable_jusqu_au})"
    )


def _afficher_resultat(resultat: ResultatCalcul) -> None:
    """Affiche le detail par arret puis les totaux avec Rich."""
    table = Table(
        title=f"Indemnites journalieres - calcul au {resultat.date_calcul}",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Arret", style="cyan")
    table.add_column("Periode")
    table.add_column("Rechute")
    table.add_column("Date d'effet")
    table.add_column("Decompte", justify="right")
    table.add_column("Jours payables", justify="right")
    table.add_column("Montant", justify="right")

    for arret in resultat.arrets:
        nom = arret.identifiant
        if arret.indices_fusionnes is not None:
            nom += f" (+{len(arret.indices_fusionnes) - 1} prolongation(s))"
        table.add_row(
            nom,
            f"{arret.date_debut} -> {arret.date_fin}",
            "oui" if arret.est_rechute else "non",
            str(arret.date_effet) if arret.date_effet else "-",
            str(arret.jours_decompte),
            str(arret.jours_payables),
            f"{_arrondir(arret.montant)}",
        )

    table.add_section()
    table.add_row(
        "[bold]Total[/bold]", "", "", "", "",
        f"[bold]{resultat.total_jours_payables}[/bold]",
        f"[bold green]{resultat.montant_total_arrondi}[/bold green]",
    )
    console.print(table)

    ventilation = Table(title="Ventilation par palier", show_header=True, header_style="bold")
    ventilation.add_column("Arret", style="cyan")
    ventilation.add_column("Du")
    ventilation.add_column("Au")
    ventilation.add_column("Palier", justify="right")
    ventilation.add_column("Jours", justify="right")
    ventilation.add_column("Taux", justify="right")
    ventilation.add_column("Montant", justify="right")
    for arret in resultat.arrets:
        for entree in arret.ventilation:
            ventilation.add_row(
                arret.identifiant,
                str(entree.debut),
                str(entree.fin),
                str(entree.palier),
                str(entree.jours),
                str(entree.taux),
                f"{_arrondir(entree.montant)}",
            )
    if ventilation.row_count:
        console.print(ventilation)

    console.print(f"Age a la date du calcul: {resultat.age_date_calcul} ans")
    if resultat.nb_trimestres is not None:
        console.print(f"Trimestres d'affiliation: {resultat.nb_trimestres}")
    if resultat.dates_fin_periodes:
        for cle, fin in resultat.dates_fin_periodes.items():
            console.print(f"{cle.replace('_', ' ').capitalize()}: {fin}")
    for avertissement in resultat.avertissements:
        console.print(f"[yellow]Avertissement: {avertissement}[/yellow]")
