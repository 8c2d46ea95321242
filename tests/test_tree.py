"""
Tests de l'arbre k-d : construction, insertion, requêtes, sérialisation.
"""

import math
import random

import numpy as np
import pytest

from kdspace.core.points import FLOAT_MIN, Tree2D, Tree3D, TreeND, make_tree

S2 = (FLOAT_MIN, FLOAT_MIN)

def brute_force(points, min_point, max_point):
    return [p for p in points
            if all(lo <= v <= hi for v, lo, hi in zip(p, min_point, max_point))]

def random_points(rng, n, dims, high=20):
    return [tuple(float(rng.randint(0, high)) for _ in range(dims)) for _ in range(n)]

def random_box(rng, dims, high=20):
    lo, hi = [], []
    for _ in range(dims):
        a, b = sorted((rng.uniform(-1, high + 1), rng.uniform(-1, high + 1)))
        lo.append(a)
        hi.append(b)
    return tuple(lo), tuple(hi)

def shape(node):
    """Forme et contenu d'un sous-arbre sous forme de tuples imbriqués."""
    if node is None:
        return None
    return (node.point, shape(node.left), shape(node.right))

def test_diagonal_scenario():
    """Cinq points sur la diagonale, requête ((1,1),(3,3))."""
    tree = Tree2D([(0, 0), (1, 1), (2, 2), (3, 3), (4, 4)])
    result = tree.query((1, 1), (3, 3))

    assert sorted(result) == [(1.0, 1.0), (2.0, 2.0), (3.0, 3.0)]

def test_empty_tree():
    tree = Tree2D()

    assert tree.root is None
    assert tree.is_empty()
    assert tree.query((0, 0), (1, 1)) == []
    assert tree.to_list() == [S2]
    assert tree.get_height() == 0
    assert len(tree) == 0
    assert str(tree) == "Empty Tree"

    empty_built = Tree2D([])
    assert empty_built.root is None

def test_single_point():
    tree = Tree3D([(1, 2, 3)])

    assert tree.root is not None and tree.root.is_leaf()
    assert tree.get_height() == 1
    assert tree.get_node_count() == 1
    assert tree.query((0, 0, 0), (5, 5, 5)) == [(1.0, 2.0, 3.0)]

def test_insert_into_empty_creates_root():
    tree = Tree2D()
    tree.insert((3, 4))

    assert tree.root.point == (3.0, 4.0)
    assert tree.root.is_leaf()

def test_balanced_height():
    """La construction par médianes donne ceil(log2(n+1)) niveaux."""
    print("\n--- Test de l'équilibre ---")
    rng = random.Random(1)
    for n in (1, 2, 3, 4, 7, 8, 100, 1000):
        coords = rng.sample(range(100000), n)
        points = [(float(c), float(rng.random())) for c in coords]
        tree = Tree2D(points)
        assert tree.get_height() == math.ceil(math.log2(n + 1))
        assert tree.get_node_count() == n
    print("✓ Hauteurs équilibrées")

def test_construction_routes_equal_values_left():
    """Construction : les valeurs égales à la médiane peuvent aller à gauche."""
    tree = Tree2D([(1, 0), (1, 1), (1, 2)])

    assert tree.to_list() == [(1.0, 2.0), (1.0, 1.0), S2, S2, (1.0, 0.0), S2, S2]

def test_insertion_routes_equal_values_right():
    """Insertion : strictement inférieur à gauche, égal à droite."""
    tree = Tree2D([(5, 5)])
    tree.insert((5, 0))
    tree.insert((4, 9))
    tree.insert((6, 1))

    assert tree.root.right.point == (5.0, 0.0)
    assert tree.root.left.point == (4.0, 9.0)
    # deuxième niveau : axe 1
    assert tree.root.right.right.point == (6.0, 1.0)

def test_insert_duplicates_kept():
    tree = Tree2D()
    for _ in range(3):
        tree.insert((1, 1))

    assert tree.get_node_count() == 3
    assert tree.query((1, 1), (1, 1)) == [(1.0, 1.0)] * 3

def test_build_does_not_reorder_caller_sequence():
    points = [(3, 0), (1, 0), (2, 0), (0, 0)]
    original = list(points)
    Tree2D(points)

    assert points == original

@pytest.mark.parametrize("iterative", [False, True])
def test_query_matches_brute_force(iterative):
    """Les requêtes retournent exactement les points de la boîte (multiensemble)."""
    print("\n--- Test de la justesse des requêtes ---")
    rng = random.Random(3)
    for dims in (1, 2, 3, 4):
        points = random_points(rng, 300, dims)
        tree = make_tree(dims, points, iterative=iterative)
        for _ in range(40):
            lo, hi = random_box(rng, dims)
            assert sorted(tree.query(lo, hi)) == sorted(brute_force(points, lo, hi))
    print("✓ Requêtes identiques à la recherche naïve")

def test_query_after_insertions_matches_brute_force():
    rng = random.Random(4)
    points = random_points(rng, 100, 3)
    tree = Tree3D(points)
    extra = random_points(rng, 100, 3)
    for p in extra:
        tree.insert(p)

    all_points = points + extra
    for _ in range(40):
        lo, hi = random_box(rng, 3)
        assert sorted(tree.query(lo, hi)) == sorted(brute_force(all_points, lo, hi))

def test_inserted_point_is_found():
    rng = random.Random(5)
    tree = Tree2D(random_points(rng, 50, 2))
    tree.insert((7.5, 3.25))

    assert (7.5, 3.25) in tree.query((7, 3), (8, 4))
    assert (7.5, 3.25) in tree.query((7.5, 3.25), (7.5, 3.25))

def test_query_output_list_is_extended():
    tree = Tree2D([(0, 0), (1, 1)])
    output = [("déjà", "là")]
    result = tree.query((0, 0), (0, 0), output)

    assert result is output
    assert output == [("déjà", "là"), (0.0, 0.0)]

def test_query_invalid_box():
    tree = Tree2D([(0, 0)])
    with pytest.raises(ValueError):
        tree.query((0, 2), (1, 1))

def test_recursive_and_iterative_agree():
    """Les deux modes produisent le même ordre de résultats et la même séquence."""
    rng = random.Random(6)
    points = random_points(rng, 200, 3)
    extra = random_points(rng, 50, 3)

    recursive = Tree3D(points)
    iterative = Tree3D(points, iterative=True)
    for p in extra:
        recursive.insert(p)
        iterative.insert(p)

    assert shape(recursive.root) == shape(iterative.root)
    assert recursive.to_list() == iterative.to_list()
    for _ in range(20):
        lo, hi = random_box(rng, 3)
        assert recursive.query(lo, hi) == iterative.query(lo, hi)

@pytest.mark.parametrize("iterative", [False, True])
def test_round_trip(iterative):
    """from_list(to_list(T)) reproduit la forme et le contenu de T."""
    rng = random.Random(8)
    tree = Tree2D(random_points(rng, 120, 2))
    for p in random_points(rng, 30, 2):
        tree.insert(p)

    flat = tree.to_list()
    assert len(flat) == 2 * tree.get_node_count() + 1

    restored = Tree2D(iterative=iterative).from_list(flat)
    assert shape(restored.root) == shape(tree.root)
    assert restored.to_list() == flat

def test_from_list_overwrites_previous_structure():
    tree = Tree2D([(9, 9), (8, 8)])
    tree.from_list([(1, 1), S2, S2])

    assert list(tree) == [(1.0, 1.0)]

@pytest.mark.parametrize("iterative", [False, True])
def test_truncated_sequence_is_completed_with_nulls(iterative):
    tree = Tree2D(iterative=iterative)
    tree.from_list([(1, 1), (0, 0)])

    assert tree.root.point == (1.0, 1.0)
    assert tree.root.left.point == (0.0, 0.0)
    assert tree.root.left.is_leaf()
    assert tree.root.right is None

@pytest.mark.parametrize("iterative", [False, True])
def test_strict_restore_rejects_bad_sequences(iterative):
    tree = Tree2D(iterative=iterative)
    with pytest.raises(ValueError):
        tree.from_list([(1, 1), S2], strict=True)
    with pytest.raises(ValueError):
        tree.from_list([S2, (1, 1)], strict=True)

    tree.from_list([(1, 1), S2, S2], strict=True)
    assert tree.get_node_count() == 1

@pytest.mark.parametrize("iterative", [False, True])
def test_failed_strict_restore_keeps_previous_tree(iterative):
    """Une restauration stricte rejetée ne modifie pas l'arbre courant."""
    tree = Tree2D([(9, 9), (8, 8)], iterative=iterative)
    before = tree.to_list()

    # valeurs en trop après un arbre complet
    with pytest.raises(ValueError, match="trop longue"):
        tree.from_list([(1, 1), S2, S2, (5, 5)], strict=True)
    assert tree.to_list() == before

    # séquence tronquée
    with pytest.raises(ValueError, match="tronquée"):
        tree.from_list([(1, 1), S2], strict=True)
    assert tree.to_list() == before
    assert tree.get_node_count() == 2

def test_sentinel_point_is_lost_on_round_trip():
    """Un point égal à la sentinelle devient un enfant absent après restauration."""
    tree = Tree2D()
    tree.insert(S2)
    restored = Tree2D().from_list(tree.to_list())

    assert tree.get_node_count() == 1
    assert restored.root is None

def test_sorted_input_builds_valid_tree():
    """Entrées triées : sélection quadratique mais arbre valide et équilibré."""
    print("\n--- Test des entrées triées ---")
    n = 512
    for points in ([(i, i) for i in range(n)], [(i, i) for i in range(n, 0, -1)]):
        tree = Tree2D(points)
        assert tree.get_node_count() == n
        assert tree.get_height() == math.ceil(math.log2(n + 1))
        assert sorted(tree.query((100, 100), (200, 200))) == \
            sorted(brute_force([tuple(map(float, p)) for p in points], (100, 100), (200, 200)))
    print("✓ Arbres valides pour les entrées triées")

def test_iterative_mode_handles_linear_depth():
    """Des insertions croissantes donnent un arbre linéaire, traité sans récursion."""
    n = 1200
    tree = Tree2D(iterative=True)
    for i in range(n):
        tree.insert((i, i))

    assert tree.get_height() == n
    assert len(tree.query((0, 0), (n, n))) == n

    flat = tree.to_list()
    restored = Tree2D(iterative=True).from_list(flat, strict=True)
    assert restored.to_list() == flat

def test_split():
    tree = Tree2D()
    assert tree.split((2, 3), 0, (0, 0), (10, 10)) == ((2, 0), (2, 10))
    assert tree.split((2, 3), 1, (0, 0), (10, 10)) == ((0, 3), (10, 3))

    tree3 = Tree3D()
    assert tree3.split((1, 2, 3), 1, (0, 0, 0), (9, 9, 9)) == ((0, 2, 0), (9, 2, 9))

def test_iter_splits():
    tree = Tree2D([(0, 0), (1, 1), (2, 2), (3, 3), (4, 4)])
    splits = list(tree.iter_splits((-1, -1), (5, 5)))

    assert len(splits) == 5
    depth, axis, point, smin, smax = splits[0]
    assert (depth, axis) == (0, 0)
    assert point == tree.root.point
    assert smin == (point[0], -1.0) and smax == (point[0], 5.0)

    # l'enfant gauche est coupé à l'intérieur de la moitié inférieure
    depth, axis, point, smin, smax = splits[1]
    assert (depth, axis) == (1, 1)
    assert point == tree.root.left.point
    assert smin == (-1.0, point[1]) and smax == (tree.root.point[0], point[1])

    assert list(Tree2D().iter_splits((0, 0), (1, 1))) == []

def test_iteration_and_statistics(tmp_path):
    tree = Tree2D([(0, 0), (1, 1), (2, 2), (3, 3), (4, 4)])

    assert list(tree) == [p for p in tree.to_list() if p != S2]
    assert len(tree) == 5

    stats = tree.get_statistics()
    assert stats["node_count"] == 5
    assert stats["leaf_count"] == tree.get_leaf_count() == 2
    assert stats["height"] == stats["balanced_height"] == 3
    assert stats["dims"] == 2
    assert str(tree) == "Tree2D(k=2, nodes=5, leaves=2, height=3)"

    stats_file = tmp_path / "stats.txt"
    tree.save_statistics(str(stats_file))
    assert "Nombre total de nœuds : 5" in stats_file.read_text(encoding="utf-8")

    assert Tree2D().get_statistics() == {"error": "Arbre vide"}

def test_numpy_input_and_adapters():
    points = np.arange(12, dtype=np.float32).reshape(4, 3)
    tree = Tree3D(points)

    assert sorted(tree.query(np.array([0, 0, 0]), np.array([5, 5, 5]))) == \
        [(0.0, 1.0, 2.0), (3.0, 4.0, 5.0)]

    with pytest.raises(ValueError):
        Tree2D(points)
    with pytest.raises(ValueError):
        Tree2D().insert((1, 2, 3))

    # un tableau vide doit aussi avoir la bonne largeur
    assert Tree2D(np.zeros((0, 2))).is_empty()
    with pytest.raises(ValueError):
        Tree2D(np.zeros((0, 3)))
    with pytest.raises(ValueError):
        Tree2D(np.zeros(0))

    assert isinstance(make_tree(2), Tree2D)
    assert isinstance(make_tree(3), Tree3D)
    nd = make_tree(5, [(1, 2, 3, 4, 5)])
    assert isinstance(nd, TreeND) and nd.k == 5
    assert nd.invalid_point == (FLOAT_MIN,) * 5

    with pytest.raises(ValueError):
        TreeND(0)
