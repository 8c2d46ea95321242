"""
Tests de l'évaluation des requêtes contre la recherche naïve.
"""

import numpy as np
import pytest

from kdspace.core.points import make_tree
from kdspace.utils.cli_generate import generate_points
from kdspace.utils.evaluation import brute_force_query, evaluate_box, evaluate_tree, random_boxes

def test_brute_force_query():
    points = np.array([[0, 0], [1, 1], [2, 2], [3, 3], [4, 4]], dtype=np.float32)
    found = brute_force_query(points, np.array([1, 1]), np.array([3, 3]))

    np.testing.assert_array_equal(found, points[1:4])

def test_random_boxes_are_valid():
    points = generate_points(100, 3, seed=1)
    boxes = random_boxes(points, 20, box_fraction=0.2, seed=1)

    assert len(boxes) == 20
    for lo, hi in boxes:
        assert lo.shape == (3,) and np.all(lo <= hi)

    with pytest.raises(ValueError):
        random_boxes(np.zeros((0, 2)), 3)

def test_evaluate_box_detects_mismatch():
    points = np.array([[0, 0], [1, 1]], dtype=np.float64)
    tree = make_tree(2, points[:1])
    result = evaluate_box(tree, points, np.array([0, 0]), np.array([1, 1]))

    assert result["found"] == 1 and result["expected"] == 2
    assert not result["match"]

@pytest.mark.parametrize("n_jobs", [1, 2])
def test_evaluate_tree_matches(n_jobs):
    """L'arbre et la recherche naïve donnent les mêmes points."""
    print("\n--- Test de l'évaluation ---")
    points = generate_points(2000, 2, seed=3)
    tree = make_tree(2, points)
    boxes = random_boxes(points, 30, box_fraction=0.3, seed=3)

    results = evaluate_tree(tree, points, boxes, n_jobs=n_jobs)
    assert results["queries"] == 30
    assert results["mismatches"] == 0
    assert results["avg_found"] > 0
    print(f"✓ Accélération: {results['speedup']:.2f}x")

def test_generate_points():
    points = generate_points(50, 4, low=-2, high=3, seed=5)
    assert points.shape == (50, 4) and points.dtype == np.float32
    assert np.all(points >= -2) and np.all(points <= 3)
    np.testing.assert_array_equal(points, generate_points(50, 4, low=-2, high=3, seed=5))

    sorted_points = generate_points(50, 2, seed=5, sort_axis=True)
    assert np.all(np.diff(sorted_points[:, 0]) >= 0)

    with pytest.raises(ValueError):
        generate_points(10, 0)
    with pytest.raises(ValueError):
        generate_points(10, 2, low=1, high=0)
