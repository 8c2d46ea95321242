"""
Module d'évaluation des requêtes par boîte.
Compare les résultats de l'arbre à un parcours exhaustif des points.
"""

import time
from typing import Any, Dict, List, Tuple

import numpy as np
from joblib import Parallel, delayed
from tqdm.auto import tqdm

from kdspace.core.tree import KDTree

Box = Tuple[np.ndarray, np.ndarray]

def brute_force_query(points: np.ndarray, min_point: np.ndarray, max_point: np.ndarray) -> np.ndarray:
    """
    Recherche naïve : tous les points de la boîte fermée [min_point, max_point].

    Args:
        points: Tableau des points (shape: [n, k])
        min_point: Coin inférieur
        max_point: Coin supérieur

    Returns:
        np.ndarray: Les points contenus, dans l'ordre du tableau
    """
    mask = np.all((points >= min_point) & (points <= max_point), axis=1)
    return points[mask]

def random_boxes(points: np.ndarray, n_boxes: int, box_fraction: float = 0.1, seed: int = 42) -> List[Box]:
    """
    Génère des boîtes aléatoires dans l'étendue des points.

    Args:
        points: Tableau des points (shape: [n, k])
        n_boxes: Nombre de boîtes
        box_fraction: Largeur des boîtes en fraction de l'étendue de chaque axe
        seed: Graine aléatoire

    Returns:
        List[Box]: Liste de couples (min, max)
    """
    if len(points) == 0:
        raise ValueError("Impossible de générer des boîtes sans points")

    rng = np.random.default_rng(seed)
    low = points.min(axis=0)
    high = points.max(axis=0)
    width = (high - low) * box_fraction

    boxes = []
    for _ in range(n_boxes):
        corner = rng.uniform(low, high)
        boxes.append((corner - width / 2, corner + width / 2))
    return boxes

def _sorted_rows(rows: np.ndarray) -> np.ndarray:
    if len(rows) == 0:
        return rows
    return rows[np.lexsort(rows.T[::-1])]

def evaluate_box(tree: KDTree, points: np.ndarray, min_point: np.ndarray, max_point: np.ndarray) -> Dict[str, Any]:
    """
    Exécute une requête dans l'arbre et la compare à la recherche naïve.

    Returns:
        Dict: found, expected, match, tree_time, naive_time
    """
    start = time.time()
    found = tree.query(min_point, max_point)
    tree_time = time.time() - start

    start = time.time()
    expected = brute_force_query(points, min_point, max_point)
    naive_time = time.time() - start

    found_rows = np.asarray(found, dtype=points.dtype).reshape(-1, points.shape[1])
    match = (len(found_rows) == len(expected)
             and np.array_equal(_sorted_rows(found_rows), _sorted_rows(expected)))

    return {
        "found": len(found_rows),
        "expected": len(expected),
        "match": bool(match),
        "tree_time": tree_time,
        "naive_time": naive_time,
    }

def evaluate_tree(tree: KDTree, points: np.ndarray, boxes: List[Box], n_jobs: int = 1) -> Dict[str, Any]:
    """
    Évalue l'arbre sur une série de boîtes.
    L'arbre n'est que lu : les requêtes peuvent s'exécuter en parallèle (threads).

    Args:
        tree: Arbre construit sur points
        points: Tableau des points stockés (shape: [n, k])
        boxes: Boîtes de requête
        n_jobs: Nombre de workers joblib

    Returns:
        Dict: Statistiques agrégées (mismatches, temps moyens, accélération)
    """
    results = Parallel(n_jobs=n_jobs, prefer="threads")(
        delayed(evaluate_box)(tree, points, min_point, max_point)
        for min_point, max_point in tqdm(boxes, desc="Requêtes")
    )

    n = max(len(results), 1)
    avg_tree_time = sum(r["tree_time"] for r in results) / n
    avg_naive_time = sum(r["naive_time"] for r in results) / n

    return {
        "queries": len(results),
        "mismatches": sum(1 for r in results if not r["match"]),
        "avg_found": sum(r["found"] for r in results) / n,
        "avg_tree_time": avg_tree_time,
        "avg_naive_time": avg_naive_time,
        "speedup": avg_naive_time / avg_tree_time if avg_tree_time > 0 else float("inf"),
    }
