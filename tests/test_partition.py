"""
Tests de la sélection par statistique d'ordre.
"""

import random

from kdspace.core.partition import index_sort, partition

def cmp(a, b):
    return (a > b) - (a < b)

def cmp_first(a, b):
    return cmp(a[0], b[0])

def test_partition_places_pivot():
    """Le pivot (premier élément) finit à sa place, <= avant, > après."""
    items = [5, 8, 1, 5, 9, 2, 7]
    pivot = partition(items, 0, len(items), cmp)

    assert items[pivot] == 5
    assert all(v <= 5 for v in items[:pivot])
    assert all(v > 5 for v in items[pivot + 1:])
    assert pivot == 3

def test_partition_subrange_only():
    items = [100, 3, 1, 2, -100]
    pivot = partition(items, 1, 4, cmp)

    assert pivot == 3
    assert items[0] == 100 and items[4] == -100
    assert items[1:4] == [2, 1, 3]

def test_index_sort_matches_sorted():
    """Chaque indice reçoit l'élément qu'il aurait après un tri complet."""
    rng = random.Random(7)
    for _ in range(50):
        values = [rng.randint(0, 20) for _ in range(rng.randint(1, 40))]
        for index in range(len(values)):
            items = list(values)
            index_sort(items, 0, len(items), index, cmp)
            assert items[index] == sorted(values)[index]
            assert all(v <= items[index] for v in items[:index])
            assert all(v >= items[index] for v in items[index + 1:])

def test_index_sort_subrange():
    items = [50, 9, 7, 8, 6, -50]
    index_sort(items, 1, 5, 2, cmp)

    assert items[2] == 7
    assert items[0] == 50 and items[5] == -50

def test_index_sort_duplicates_exact_element():
    """Avec des clés égales, l'élément retenu suit la règle du premier pivot."""
    items = [(1, "a"), (1, "b"), (1, "c")]
    index_sort(items, 0, 3, 1, cmp_first)

    assert items == [(1, "b"), (1, "c"), (1, "a")]

def test_index_sort_sorted_input_does_not_overflow():
    """Une entrée triée (pire cas) ne doit pas épuiser la pile."""
    print("\n--- Test du pire cas de la sélection ---")
    for values in (list(range(2000)), list(range(2000, 0, -1))):
        items = list(values)
        index_sort(items, 0, len(items), len(items) // 2, cmp)
        assert items[len(items) // 2] == sorted(values)[len(values) // 2]
    print("✓ Entrées triées et inversées traitées")
