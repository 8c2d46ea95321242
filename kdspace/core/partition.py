"""
Sélection par statistique d'ordre pour la construction équilibrée.
Place à un indice donné l'élément qui y serait après un tri complet, sans trier.
"""

from typing import Any, Callable, List

def swap(items: List[Any], i: int, j: int) -> None:
    """Échange deux éléments de la liste."""
    items[i], items[j] = items[j], items[i]

def partition(items: List[Any], start: int, end: int, key: Callable[[Any, Any], int]) -> int:
    """
    Partitionne items[start:end] autour du premier élément (pivot).

    Les éléments qui se comparent <= au pivot le précèdent, les autres le suivent.

    Args:
        items: Liste modifiée en place
        start: Début de la plage (inclus)
        end: Fin de la plage (exclue)
        key: Comparaison à trois voies (négatif, zéro, positif)

    Returns:
        int: Indice final du pivot
    """
    i = start
    pivot_value = items[start]
    for j in range(start + 1, end):
        if key(items[j], pivot_value) <= 0:
            i += 1
            swap(items, i, j)
    swap(items, i, start)
    return i

def index_sort(items: List[Any], start: int, end: int, index: int, key: Callable[[Any, Any], int]) -> None:
    """
    Quickselect : réordonne items[start:end] jusqu'à ce que items[index]
    soit l'élément de rang index.

    Le pivot est toujours le premier élément de la plage active, d'où un coût
    quadratique sur une entrée déjà triée. Seul le côté contenant index est conservé.

    Args:
        items: Liste modifiée en place
        start: Début de la plage (inclus)
        end: Fin de la plage (exclue)
        index: Indice cible, start <= index < end
        key: Comparaison à trois voies
    """
    while start < end:
        pivot = partition(items, start, end, key)
        if pivot > index:
            end = pivot
        elif pivot < index:
            start = pivot + 1
        else:
            return
