"""Interface en ligne de commande CalculIJ (cij)."""
