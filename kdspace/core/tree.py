"""
Module de structures d'arbre pour KDSpace.
Définit le nœud et l'arbre k-d générique (construction équilibrée, insertion,
requête par boîte, aplatissement/restauration).
"""

import math
from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Iterable, Iterator, List, Optional, Tuple, TypeVar

from kdspace.core.partition import index_sort

P = TypeVar("P")
S = TypeVar("S")

class KDNode:
    """
    Nœud de l'arbre k-d.
    Possède exclusivement ses deux sous-arbres et contient exactement un point.
    """

    def __init__(self, point: Any):
        self.point = point
        self.left: Optional["KDNode"] = None
        self.right: Optional["KDNode"] = None

    def is_leaf(self) -> bool:
        """Vérifie si ce nœud n'a aucun enfant."""
        return self.left is None and self.right is None

    def get_size(self) -> int:
        """
        Calcule la taille du sous-arbre enraciné à ce nœud.

        Returns:
            int: Nombre total de nœuds dans le sous-arbre
        """
        size = 0
        stack = [self]
        while stack:
            node = stack.pop()
            size += 1
            if node.left is not None:
                stack.append(node.left)
            if node.right is not None:
                stack.append(node.right)
        return size

    def __str__(self) -> str:
        if self.is_leaf():
            return f"Leaf(point={self.point})"
        return f"Node(point={self.point})"

class _RestoreCursor:
    """Position de lecture dans une séquence aplatie, partagée par une seule restauration."""

    def __init__(self, values: List[Any]):
        self.values = values
        self.index = 0

    def exhausted(self) -> bool:
        return self.index >= len(self.values)

    def next(self) -> Any:
        value = self.values[self.index]
        self.index += 1
        return value

class KDTree(ABC, Generic[P, S]):
    """
    Arbre k-d générique, indépendant de la dimension.

    Les sous-classes fournissent le type concret de point : le nombre de
    dimensions k, le point sentinelle, et l'accès par axe (get_axis/set_axis).
    L'axe de coupure d'un nœud de profondeur d est d % k.

    La construction envoie à gauche les points <= médiane sur l'axe courant,
    l'insertion envoie à gauche uniquement les points strictement inférieurs.
    """

    def __init__(self, points: Optional[Iterable[P]] = None, iterative: bool = False):
        """
        Initialise un arbre k-d.

        Args:
            points: Points à insérer par construction équilibrée (optionnel)
            iterative: Si True, utilise des piles explicites au lieu de la récursion
                       pour l'insertion, la requête et la sérialisation
        """
        self.root: Optional[KDNode] = None
        self.iterative = iterative
        self.stats: Dict[str, Any] = {}

        if points is not None:
            self.build(points)

    # ------------------------------------------------------------------
    # Capacités du type de point
    # ------------------------------------------------------------------
    @property
    @abstractmethod
    def k(self) -> int:
        """Nombre de dimensions."""

    @property
    @abstractmethod
    def invalid_point(self) -> P:
        """Point considéré invalide, utilisé pour marquer les enfants absents."""

    @abstractmethod
    def get_axis(self, p: P, d: int) -> S:
        """Retourne la coordonnée du point sur l'axe d."""

    @abstractmethod
    def set_axis(self, p: P, d: int, value: S) -> P:
        """Retourne le point avec la coordonnée de l'axe d remplacée par value."""

    def compare(self, a: S, b: S) -> int:
        """Comparaison à trois voies de deux scalaires."""
        return (a > b) - (a < b)

    def points_equal(self, a: P, b: P) -> bool:
        return a == b

    def as_point(self, p: Any) -> P:
        """Convertit une valeur fournie par l'appelant en point."""
        return p

    def as_points(self, points: Iterable[Any]) -> List[P]:
        return [self.as_point(p) for p in points]

    def _next_axis(self, d: int) -> int:
        return (d + 1) % self.k

    # ------------------------------------------------------------------
    # Construction équilibrée
    # ------------------------------------------------------------------
    def build(self, points: Iterable[P]) -> "KDTree[P, S]":
        """
        Construit un arbre équilibré par médianes à partir des points.
        La structure précédente est remplacée. La séquence de l'appelant n'est pas réordonnée.

        Args:
            points: Points dans un ordre quelconque

        Returns:
            KDTree: L'arbre lui-même
        """
        items = self.as_points(points)
        self.root = self._build(items, 0, 0, len(items))
        self.stats = {}
        return self

    def _build(self, points: List[P], d: int, start: int, end: int) -> Optional[KDNode]:
        size = end - start
        if size < 1:
            return None
        if size == 1:
            return KDNode(points[start])

        mid = start + size // 2
        nd = self._next_axis(d)

        index_sort(points, start, end, mid,
                   lambda a, b: self.compare(self.get_axis(a, d), self.get_axis(b, d)))

        node = KDNode(points[mid])
        node.left = self._build(points, nd, start, mid)
        node.right = self._build(points, nd, mid + 1, end)
        return node

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------
    def insert(self, point: P) -> None:
        """
        Insère un point sans rééquilibrer l'arbre.
        Strictement inférieur sur l'axe courant : à gauche, sinon à droite.

        Args:
            point: Point à insérer (les doublons sont acceptés)
        """
        point = self.as_point(point)
        self.stats = {}
        if self.iterative:
            self._insert_iterative(point)
        else:
            self.root = self._insert(self.root, 0, point)

    def _insert(self, node: Optional[KDNode], d: int, point: P) -> KDNode:
        if node is None:
            return KDNode(point)

        nd = self._next_axis(d)
        if self.compare(self.get_axis(point, d), self.get_axis(node.point, d)) < 0:
            node.left = self._insert(node.left, nd, point)
        else:
            node.right = self._insert(node.right, nd, point)
        return node

    def _insert_iterative(self, point: P) -> None:
        if self.root is None:
            self.root = KDNode(point)
            return

        node = self.root
        d = 0
        while True:
            if self.compare(self.get_axis(point, d), self.get_axis(node.point, d)) < 0:
                if node.left is None:
                    node.left = KDNode(point)
                    return
                node = node.left
            else:
                if node.right is None:
                    node.right = KDNode(point)
                    return
                node = node.right
            d = self._next_axis(d)

    # ------------------------------------------------------------------
    # Requête par boîte
    # ------------------------------------------------------------------
    def query(self, min_point: P, max_point: P, output: Optional[List[P]] = None) -> List[P]:
        """
        Récupère tous les points de la boîte fermée [min_point, max_point].

        L'ordre du résultat suit le parcours de l'arbre (nœud, droite, gauche),
        il n'est pas trié.

        Args:
            min_point: Coin inférieur de la boîte
            max_point: Coin supérieur de la boîte
            output: Liste à compléter (optionnel)

        Returns:
            List: Les points contenus dans la boîte

        Raises:
            ValueError: Si min_point dépasse max_point sur un axe
        """
        min_point = self.as_point(min_point)
        max_point = self.as_point(max_point)
        self._check_box(min_point, max_point)

        if output is None:
            output = []

        if self.iterative:
            self._query_iterative(min_point, max_point, output)
        else:
            self._query(self.root, 0, min_point, max_point, output)
        return output

    def _check_box(self, min_point: P, max_point: P) -> None:
        for d in range(self.k):
            if self.compare(self.get_axis(min_point, d), self.get_axis(max_point, d)) > 0:
                raise ValueError(f"Boîte de requête invalide : min > max sur l'axe {d}")

    def _contains_other_axes(self, point: P, d: int, min_point: P, max_point: P) -> bool:
        # l'axe d a déjà été vérifié par l'appelant
        od = d
        for _ in range(self.k - 1):
            od = self._next_axis(od)
            t = self.get_axis(point, od)
            if (self.compare(t, self.get_axis(min_point, od)) < 0
                    or self.compare(t, self.get_axis(max_point, od)) > 0):
                return False
        return True

    def _query(self, node: Optional[KDNode], d: int, min_point: P, max_point: P, points: List[P]) -> None:
        if node is None:
            return

        t = self.get_axis(node.point, d)
        nd = self._next_axis(d)

        if self.compare(t, self.get_axis(min_point, d)) < 0:
            self._query(node.right, nd, min_point, max_point, points)
        elif self.compare(t, self.get_axis(max_point, d)) <= 0:
            if self._contains_other_axes(node.point, d, min_point, max_point):
                points.append(node.point)
            self._query(node.right, nd, min_point, max_point, points)
            self._query(node.left, nd, min_point, max_point, points)
        else:
            self._query(node.left, nd, min_point, max_point, points)

    def _query_iterative(self, min_point: P, max_point: P, points: List[P]) -> None:
        stack: List[Tuple[KDNode, int]] = []
        if self.root is not None:
            stack.append((self.root, 0))

        while stack:
            node, d = stack.pop()
            t = self.get_axis(node.point, d)
            nd = self._next_axis(d)

            if self.compare(t, self.get_axis(min_point, d)) < 0:
                children = (node.right,)
            elif self.compare(t, self.get_axis(max_point, d)) <= 0:
                if self._contains_other_axes(node.point, d, min_point, max_point):
                    points.append(node.point)
                # la droite est dépilée en premier
                children = (node.left, node.right)
            else:
                children = (node.left,)

            for child in children:
                if child is not None:
                    stack.append((child, nd))

    # ------------------------------------------------------------------
    # Aplatissement / restauration
    # ------------------------------------------------------------------
    def to_list(self) -> List[P]:
        """
        Convertit l'arbre en liste pour la sérialisation.

        Parcours préfixe (nœud, gauche, droite) ; chaque enfant absent
        occupe une case contenant le point sentinelle.

        Returns:
            List: La séquence aplatie
        """
        values: List[P] = []
        if self.iterative:
            stack: List[Optional[KDNode]] = [self.root]
            while stack:
                node = stack.pop()
                if node is None:
                    values.append(self.invalid_point)
                    continue
                values.append(node.point)
                stack.append(node.right)
                stack.append(node.left)
        else:
            self._to_list(self.root, values)
        return values

    def _to_list(self, node: Optional[KDNode], values: List[P]) -> None:
        if node is None:
            values.append(self.invalid_point)
            return
        values.append(node.point)
        self._to_list(node.left, values)
        self._to_list(node.right, values)

    def from_list(self, values: Iterable[Any], strict: bool = False) -> "KDTree[P, S]":
        """
        Reconstruit l'arbre depuis une séquence produite par to_list.
        La structure précédente est écrasée.

        Une séquence tronquée est complétée par des enfants absents. En mode
        strict, une séquence tronquée ou suivie de valeurs non lues est rejetée.

        Args:
            values: Séquence aplatie
            strict: Rejeter les séquences mal formées

        Returns:
            KDTree: L'arbre lui-même

        Raises:
            ValueError: En mode strict, si la séquence ne décrit pas exactement un arbre
        """
        cursor = _RestoreCursor(self.as_points(values))

        if self.iterative:
            root = self._from_list_iterative(cursor, strict)
        else:
            root = self._from_list(cursor, strict)

        # en cas d'erreur l'arbre courant reste intact
        if strict and not cursor.exhausted():
            raise ValueError(f"Séquence trop longue : {len(cursor.values) - cursor.index} "
                             f"valeurs non lues après l'arbre")
        self.root = root
        self.stats = {}
        return self

    def _read_slot(self, cursor: _RestoreCursor, strict: bool) -> Optional[KDNode]:
        if cursor.exhausted():
            if strict:
                raise ValueError(f"Séquence tronquée après {cursor.index} valeurs")
            return None

        value = cursor.next()
        if self.points_equal(value, self.invalid_point):
            return None
        return KDNode(value)

    def _from_list(self, cursor: _RestoreCursor, strict: bool) -> Optional[KDNode]:
        node = self._read_slot(cursor, strict)
        if node is None:
            return None
        node.left = self._from_list(cursor, strict)
        node.right = self._from_list(cursor, strict)
        return node

    def _from_list_iterative(self, cursor: _RestoreCursor, strict: bool) -> Optional[KDNode]:
        holder = KDNode(None)
        # chaque entrée est un emplacement à remplir : (parent, côté)
        stack: List[Tuple[KDNode, str]] = [(holder, "left")]
        while stack:
            parent, side = stack.pop()
            node = self._read_slot(cursor, strict)
            setattr(parent, side, node)
            if node is not None:
                stack.append((node, "right"))
                stack.append((node, "left"))
        return holder.left

    # ------------------------------------------------------------------
    # Découpage de l'espace
    # ------------------------------------------------------------------
    def split(self, p: P, d: int, min_point: P, max_point: P) -> Tuple[P, P]:
        """
        Découpe la boîte [min_point, max_point] au point p sur l'axe d.

        Returns:
            Tuple: (smin, smax), le segment du plan de coupure dans la boîte
        """
        smin = self.set_axis(self.invalid_point, d, self.get_axis(p, d))
        smax = self.set_axis(self.invalid_point, d, self.get_axis(p, d))

        od = d
        for _ in range(self.k - 1):
            od = self._next_axis(od)
            smin = self.set_axis(smin, od, self.get_axis(min_point, od))
            smax = self.set_axis(smax, od, self.get_axis(max_point, od))
        return smin, smax

    def iter_splits(self, min_point: P, max_point: P) -> Iterator[Tuple[int, int, P, P, P]]:
        """
        Parcourt la partition récursive de l'espace à l'intérieur d'une boîte.

        Args:
            min_point: Coin inférieur de la boîte englobante
            max_point: Coin supérieur de la boîte englobante

        Yields:
            Tuple: (profondeur, axe, point, smin, smax) pour chaque nœud, en ordre préfixe
        """
        if self.root is None:
            return

        stack = [(self.root, 0, self.as_point(min_point), self.as_point(max_point))]
        while stack:
            node, depth, box_min, box_max = stack.pop()
            d = depth % self.k
            smin, smax = self.split(node.point, d, box_min, box_max)
            yield depth, d, node.point, smin, smax

            if node.right is not None:
                stack.append((node.right, depth + 1, smin, box_max))
            if node.left is not None:
                stack.append((node.left, depth + 1, box_min, smax))

    # ------------------------------------------------------------------
    # Parcours et statistiques
    # ------------------------------------------------------------------
    def _walk(self) -> Iterator[Tuple[KDNode, int]]:
        """Parcours préfixe (nœud, gauche, droite) avec la profondeur de chaque nœud."""
        stack = [(self.root, 0)] if self.root is not None else []
        while stack:
            node, depth = stack.pop()
            yield node, depth
            if node.right is not None:
                stack.append((node.right, depth + 1))
            if node.left is not None:
                stack.append((node.left, depth + 1))

    def __iter__(self) -> Iterator[P]:
        for node, _ in self._walk():
            yield node.point

    def __len__(self) -> int:
        return self.get_node_count()

    def is_empty(self) -> bool:
        return self.root is None

    def get_height(self) -> int:
        """
        Calcule la hauteur de l'arbre en nombre de niveaux.

        Returns:
            int: 0 pour un arbre vide, 1 pour une seule feuille
        """
        return max((depth + 1 for _, depth in self._walk()), default=0)

    def get_node_count(self) -> int:
        if not self.root:
            return 0
        return self.root.get_size()

    def get_leaf_count(self) -> int:
        return sum(1 for node, _ in self._walk() if node.is_leaf())

    def get_statistics(self) -> Dict[str, Any]:
        """
        Calcule diverses statistiques sur l'arbre.

        Returns:
            Dict: Dictionnaire de statistiques
        """
        if not self.root:
            return {"error": "Arbre vide"}

        stats = {
            "dims": self.k,
            "node_count": 0,
            "leaf_count": 0,
            "height": 0,
            "balanced_height": 0,
            "min_leaf_depth": float("inf"),
            "avg_leaf_depth": 0,
            "leaf_depths": [],
        }

        for node, depth in self._walk():
            stats["node_count"] += 1
            stats["height"] = max(stats["height"], depth + 1)
            if node.is_leaf():
                stats["leaf_count"] += 1
                stats["min_leaf_depth"] = min(stats["min_leaf_depth"], depth)
                stats["leaf_depths"].append(depth)

        stats["avg_leaf_depth"] = sum(stats["leaf_depths"]) / stats["leaf_count"]
        # hauteur obtenue par la construction par médianes
        stats["balanced_height"] = math.ceil(math.log2(stats["node_count"] + 1))

        self.stats = stats
        return stats

    def save_statistics(self, file_path: str) -> None:
        """
        Sauvegarde les statistiques de l'arbre dans un fichier texte.

        Args:
            file_path: Chemin du fichier de sortie
        """
        stats = self.get_statistics()

        with open(file_path, "w", encoding="utf-8") as f:
            f.write("STATISTIQUES DE L'ARBRE K-D\n")
            f.write("===========================\n\n")

            if "error" in stats:
                f.write(f"{stats['error']}\n")
                return

            f.write("Structure générale\n")
            f.write("-----------------\n")
            f.write(f"Dimensions            : {stats['dims']}\n")
            f.write(f"Nombre total de nœuds : {stats['node_count']}\n")
            f.write(f"Nombre de feuilles    : {stats['leaf_count']}\n")
            f.write(f"Hauteur               : {stats['height']}\n")
            f.write(f"Hauteur équilibrée    : {stats['balanced_height']}\n")
            f.write(f"Profondeur min feuille: {stats['min_leaf_depth']}\n")
            f.write(f"Profondeur moy feuille: {stats['avg_leaf_depth']:.2f}\n")

    def __str__(self) -> str:
        if not self.root:
            return "Empty Tree"

        stats = self.get_statistics()
        return (f"{type(self).__name__}(k={self.k}, "
                f"nodes={stats['node_count']}, "
                f"leaves={stats['leaf_count']}, "
                f"height={stats['height']})")
