"""
Types de points concrets pour l'arbre k-d.
Les points sont des tuples de flottants ; la sentinelle utilise le plus petit float32 fini.
"""

from typing import Any, Iterable, List, Optional, Tuple

import numpy as np

from kdspace.core.tree import KDTree

# Équivalent de float.MinValue
FLOAT_MIN = float(np.finfo(np.float32).min)

Point = Tuple[float, ...]

class TupleTree(KDTree[Point, float]):
    """Arbre k-d sur des points tuples de dimension fixe."""

    dims = 0

    @property
    def k(self) -> int:
        return self.dims

    @property
    def invalid_point(self) -> Point:
        return (FLOAT_MIN,) * self.dims

    def get_axis(self, p: Point, d: int) -> float:
        return p[d]

    def set_axis(self, p: Point, d: int, value: float) -> Point:
        return p[:d] + (value,) + p[d + 1:]

    def as_point(self, p: Any) -> Point:
        point = tuple(float(v) for v in p)
        if len(point) != self.dims:
            raise ValueError(f"Point de dimension {len(point)}, attendu {self.dims}")
        return point

    def as_points(self, points: Iterable[Any]) -> List[Point]:
        """
        Convertit des points en tuples.

        Args:
            points: Itérable de points ou tableau numpy de forme (n, k)

        Returns:
            List[Point]: Les points sous forme de tuples de flottants
        """
        if isinstance(points, np.ndarray):
            if points.ndim != 2 or points.shape[1] != self.dims:
                raise ValueError(f"Tableau de forme {points.shape}, attendu (n, {self.dims})")
            if points.shape[0] == 0:
                return []
            return [tuple(row) for row in points.astype(np.float64).tolist()]
        return [self.as_point(p) for p in points]

class Tree2D(TupleTree):
    dims = 2

class Tree3D(TupleTree):
    dims = 3

class TreeND(TupleTree):
    """Arbre k-d sur des tuples de dimension quelconque."""

    def __init__(self, dims: int, points: Optional[Iterable[Any]] = None, iterative: bool = False):
        if dims < 1:
            raise ValueError(f"Nombre de dimensions invalide: {dims}")
        self.dims = dims
        super().__init__(points, iterative=iterative)

def make_tree(dims: int, points: Optional[Iterable[Any]] = None, iterative: bool = False) -> TupleTree:
    """
    Crée l'arbre adapté au nombre de dimensions.

    Args:
        dims: Nombre de dimensions des points
        points: Points pour la construction équilibrée (optionnel)
        iterative: Utiliser les parcours à pile explicite

    Returns:
        TupleTree: Tree2D, Tree3D ou TreeND
    """
    if dims == 2:
        return Tree2D(points, iterative=iterative)
    if dims == 3:
        return Tree3D(points, iterative=iterative)
    return TreeND(dims, points, iterative=iterative)
