"""Application CLI principale CalculIJ."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

import calculij

app = typer.Typer(
    name="cij",
    help="CalculIJ - Calcul des indemnites journalieres",
    no_args_is_help=True,
)

console = Console()

# Option globale stockee via le callback
_regles_path: Optional[Path] = None


def get_regles_path() -> Optional[Path]:
    """Retourne le chemin du fichier de regles, None pour les valeurs par defaut."""
    return _regles_path


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"CalculIJ version {calculij.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    regles: Optional[str] = typer.Option(
        None,
        "--regles",
        "-r",
        help="Chemin vers le fichier YAML des regles metier",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Afficher la version de CalculIJ",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """CalculIJ - Indemnites journalieres (date d'effet, rechutes, paliers, montants)."""
    global _regles_path
    _regles_path = Path(regles) if regles else None


# Import et enregistrement des sous-commandes
from calculij.cli.calcul import calculer_cmd, taux_cmd  # noqa: E402

app.command(name="calculer", help="Calculer les indemnites d'un dossier YAML")(calculer_cmd)
app.command(name="taux", help="Afficher le taux journalier d'une date")(taux_cmd)
