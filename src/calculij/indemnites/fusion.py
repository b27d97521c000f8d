"""Fusion des prolongations d'arret.

Un arret qui debute le jour ouvrable suivant la fin du precedent est une
prolongation: il est replie dans le meme groupe. La fusion ne change jamais
le nombre total de jours.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from calculij.indemnites.dates import CalendrierOuvrable
from calculij.models.arret import Arret

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupeArrets:
    """Arret issu de la fusion d'un ou plusieurs arrets d'origine.

    indices_fusionnes vaut None quand le groupe ne contient qu'un seul arret.
    """

    arret: Arret
    indice_origine: int
    indices_fusionnes: tuple[int, ...] | None = None

    @property
    def est_fusionne(self) -> bool:
        return self.indices_fusionnes is not None

    @property
    def identifiant(self) -> str:
        return self.arret.identifiant or f"arret-{self.indice_origine + 1}"


def _fermer_groupe(arrets: list[Arret], indices: list[int]) -> GroupeArrets:
    premier = arrets[0]
    if len(arrets) == 1:
        return GroupeArrets(arret=premier, indice_origine=indices[0])

    date_deb_droit = next((a.date_deb_droit for a in arrets if a.date_deb_droit), None)
    fusionne = premier.model_copy(
        update={"date_fin": arrets[-1].date_fin, "date_deb_droit": date_deb_droit}
    )
    logger.info(
        "Prolongations fusionnees: %s (%s -> %s)",
        [a.identifiant for a in arrets], fusionne.date_debut, fusionne.date_fin,
    )
    return GroupeArrets(
        arret=fusionne, indice_origine=indices[0], indices_fusionnes=tuple(indices),
    )


def fusionner_prolongations(
    arrets: list[Arret], calendrier: CalendrierOuvrable | None = None,
) -> list[GroupeArrets]:
    """Regroupe les arrets contigus (au jour ouvrable pres).

    Args:
        arrets: Arrets dans n'importe quel ordre; ils sont tries par date de
            debut (tri stable, les positions d'origine sont conservees).
        calendrier: Calendrier des jours ouvrables (defaut: feries francais).

    Returns:
        Un GroupeArrets par groupe, dans l'ordre chronologique.
    """
    calendrier = calendrier or CalendrierOuvrable()
    ordonnes = sorted(enumerate(arrets), key=lambda paire: paire[1].date_debut)

    groupes: list[GroupeArrets] = []
    courant: list[Arret] = []
    indices: list[int] = []
    for indice, arret in ordonnes:
        if courant and calendrier.est_jour_ouvrable_suivant(courant[-1].date_fin, arret.date_debut):
            courant.append(arret)
            indices.append(indice)
            continue
        if courant:
            groupes.append(_fermer_groupe(courant, indices))
        courant = [arret]
        indices = [indice]
    if courant:
        groupes.append(_fermer_groupe(courant, indices))

    return groupes
