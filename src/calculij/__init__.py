"""CalculIJ - Calcul des indemnites journalieres d'un regime de prevoyance professionnel."""

__version__ = "0.1.0"
