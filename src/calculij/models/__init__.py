from calculij.models.arret import Arret, ContexteAssure

__all__ = ["Arret", "ContexteAssure"]
