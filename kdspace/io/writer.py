"""
Module d'écriture de points et d'arbres pour KDSpace.
Fournit des fonctions pour sauvegarder des points et des arbres aplatis.
"""

import os
import struct
import time
import numpy as np

from kdspace.core.tree import KDTree

TREE_SUFFIX = ".kd.npy"

class PointWriter:
    """Classe pour écrire des points dans un fichier binaire."""

    @staticmethod
    def write_bin(points: np.ndarray, file_path: str) -> None:
        """
        Écrit des points dans un fichier binaire.
        Format: header (n, k: uint64) suivi des coordonnées en float32.

        Args:
            points: Tableau numpy contenant les points (shape: [n, k])
            file_path: Chemin du fichier de sortie
        """
        points = np.asarray(points)
        if points.ndim != 2:
            raise ValueError(f"Tableau de points de forme {points.shape}, attendu (n, k)")

        n, k = points.shape
        start_time = time.time()
        print(f"⏳ Écriture de {n:,} points (dim {k}) vers {file_path}...")

        # Créer le répertoire si nécessaire
        os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)

        points_float32 = points.astype(np.float32)

        with open(file_path, "wb") as f:
            f.write(struct.pack("<QQ", n, k))
            f.write(points_float32.tobytes())

        elapsed = time.time() - start_time
        print(f"✓ {n:,} points (dim {k}) écrits dans {file_path} [terminé en {elapsed:.2f}s]")

def write_points(points: np.ndarray, file_path: str) -> None:
    """
    Fonction utilitaire pour écrire des points dans un fichier.

    Args:
        points: Tableau numpy contenant les points (shape: [n, k])
        file_path: Chemin du fichier de sortie
    """
    PointWriter.write_bin(points, file_path)

def tree_file_path(file_path: str) -> str:
    """Retourne le chemin du fichier d'arbre aplati (.kd.npy)."""
    if file_path.endswith(TREE_SUFFIX):
        return file_path
    return os.path.splitext(file_path)[0] + TREE_SUFFIX

def write_tree(tree: KDTree, file_path: str) -> str:
    """
    Sauvegarde un arbre k-d sous sa forme aplatie (parcours préfixe avec sentinelles).

    Args:
        tree: L'arbre à sauvegarder
        file_path: Chemin du fichier de sortie

    Returns:
        str: Le chemin effectivement écrit
    """
    flat_path = tree_file_path(file_path)

    print(f"⏳ Sauvegarde de l'arbre aplati vers {flat_path}...")
    start_time = time.time()

    os.makedirs(os.path.dirname(os.path.abspath(flat_path)), exist_ok=True)

    flat = np.asarray(tree.to_list(), dtype=np.float64).reshape(-1, tree.k)
    data = {
        "dims": tree.k,
        "n_nodes": tree.get_node_count(),
        "height": tree.get_height(),
        "sentinel": np.asarray(tree.invalid_point, dtype=np.float64),
        "flat": flat,
    }
    np.save(flat_path, data, allow_pickle=True)

    elapsed = time.time() - start_time
    print(f"✓ Arbre sauvegardé ({data['n_nodes']:,} nœuds, {len(flat):,} entrées) "
          f"vers {flat_path} [terminé en {elapsed:.2f}s]")

    return flat_path
