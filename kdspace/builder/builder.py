"""
Constructeur d'arbres k-d équilibrés.
Une seule fonction qui charge les points, construit l'arbre et le sauvegarde.
"""

import time
from typing import Any, Dict, Optional, Union
import numpy as np

from kdspace.utils.config import ConfigManager
from kdspace.core.points import TupleTree, make_tree
from kdspace.io.reader import read_points
from kdspace.io.writer import write_tree

def build_kdtree(
    points: Union[np.ndarray, str],
    output_file: str,
    config: Optional[Dict[str, Any]] = None,
    dims: Optional[int] = None,
    iterative: Optional[bool] = None,
    verbose: bool = True
) -> TupleTree:
    """
    Construit un arbre k-d équilibré par médianes.

    Cette fonction fait tout:
    1. Chargement des points si nécessaire
    2. Construction équilibrée
    3. Sauvegarde de l'arbre aplati (si output_file n'est pas vide)

    Args:
        points: Soit un tableau numpy de points, soit un chemin vers un fichier de points
        output_file: Chemin du fichier de sortie ("" pour ne pas sauvegarder)
        config: Configuration personnalisée (facultatif, sinon utilise config.yaml)
        dims: Nombre de dimensions attendu (facultatif, déduit des points sinon)
        iterative: Utiliser les parcours à pile explicite (facultatif)
        verbose: Afficher les messages de progression

    Returns:
        L'arbre construit
    """
    # 1. Charger la configuration
    if config is None:
        build_config = ConfigManager().get_section("build_tree")
    else:
        build_config = config.get("build_tree", {})

    iterative = iterative if iterative is not None else build_config.get("iterative", False)

    # 2. Préparer les points
    if isinstance(points, str):
        points_data = read_points(points)
    else:
        points_data = np.asarray(points, dtype=np.float64)

    if points_data.ndim != 2:
        raise ValueError(f"Tableau de points de forme {points_data.shape}, attendu (n, k)")

    point_dims = points_data.shape[1]
    if dims is not None and dims != point_dims:
        raise ValueError(f"Les points ont {point_dims} dimensions, {dims} attendues")

    # 3. Construction équilibrée
    if verbose:
        print(f"⏳ Construction de l'arbre k-d ({len(points_data):,} points, dim {point_dims}, "
              f"{'itératif' if iterative else 'récursif'})...")

    start_time = time.time()
    tree = make_tree(point_dims, points_data, iterative=iterative)
    elapsed = time.time() - start_time

    if verbose:
        stats = tree.get_statistics()
        print(f"✓ Construction terminée en {elapsed:.2f}s")
        if "error" in stats:
            print(f"  → {stats['error']}")
        else:
            print(f"  → Statistiques de l'arbre:")
            print(f"     - Nombre de nœuds      : {stats['node_count']:,}")
            print(f"     - Nombre de feuilles   : {stats['leaf_count']:,}")
            print(f"     - Hauteur              : {stats['height']}")
            print(f"     - Hauteur équilibrée   : {stats['balanced_height']}")
            print(f"     - Profondeur moyenne   : {stats['avg_leaf_depth']:.1f}")

    # 4. Sauvegarde
    if output_file:
        write_tree(tree, output_file)

    return tree
