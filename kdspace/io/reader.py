"""
Module de lecture de points et d'arbres pour KDSpace.
"""

import os
import struct
import time
import numpy as np

from kdspace.core.points import TupleTree, make_tree
from kdspace.io.writer import tree_file_path

HEADER_SIZE = 16  # 2 entiers 64 bits

def read_points(file_path: str) -> np.ndarray:
    """
    Lit des points depuis un fichier binaire (header (n, k) + float32).

    Args:
        file_path: Chemin vers le fichier binaire

    Returns:
        np.ndarray: Tableau des points (shape: [n, k])

    Raises:
        ValueError: Si le fichier est plus court que ce qu'annonce son en-tête
    """
    start_time = time.time()
    print(f"⏳ Chargement des points depuis {file_path}...")

    with open(file_path, "rb") as f:
        header = f.read(HEADER_SIZE)
        if len(header) != HEADER_SIZE:
            raise ValueError(f"En-tête incomplet dans {file_path}")
        n, k = struct.unpack("<QQ", header)

        expected = n * k * 4  # float32 = 4 octets
        buffer = f.read(expected)
        if len(buffer) != expected:
            raise ValueError(f"Fichier tronqué: {len(buffer)} octets lus, {expected} attendus")

    points = np.frombuffer(buffer, dtype=np.float32).reshape(n, k)

    elapsed = time.time() - start_time
    print(f"✓ {n:,} points (dim {k}) chargés [terminé en {elapsed:.2f}s]")
    return points

def load_tree(file_path: str, strict: bool = False, iterative: bool = False) -> TupleTree:
    """
    Charge un arbre aplati et le restaure.

    Args:
        file_path: Chemin du fichier d'arbre (.kd.npy ajouté si absent)
        strict: Rejeter une séquence tronquée ou trop longue
        iterative: Créer un arbre utilisant les parcours à pile explicite

    Returns:
        TupleTree: L'arbre restauré
    """
    flat_path = tree_file_path(file_path)

    print(f"⏳ Chargement de l'arbre depuis {flat_path}...")
    start_time = time.time()

    data = np.load(flat_path, allow_pickle=True).item()

    dims = int(data["dims"])
    flat = np.asarray(data["flat"], dtype=np.float64)
    if flat.ndim != 2 or flat.shape[1] != dims:
        raise ValueError(f"Séquence de forme {flat.shape} incompatible avec dims={dims}")

    tree = make_tree(dims, iterative=iterative)
    if not np.array_equal(np.asarray(data["sentinel"], dtype=np.float64), np.asarray(tree.invalid_point)):
        raise ValueError("Sentinelle du fichier différente de celle de l'arbre")

    tree.from_list(flat, strict=strict)

    n_nodes = tree.get_node_count()
    if n_nodes != data.get("n_nodes", n_nodes):
        print(f"⚠️ {n_nodes:,} nœuds restaurés, {data['n_nodes']:,} annoncés par le fichier")

    elapsed = time.time() - start_time
    print(f"✓ Arbre chargé ({n_nodes:,} nœuds, dim {dims}) en {elapsed:.2f}s")
    return tree

def file_exists(file_path: str) -> bool:
    return os.path.exists(file_path) or os.path.exists(tree_file_path(file_path))
