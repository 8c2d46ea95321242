"""
Module pour la génération de jeux de points.
Produit des fichiers de points aléatoires pour construire et tester des arbres.
"""

import time
import datetime
import argparse
import numpy as np

from kdspace.io.writer import write_points

def format_time(seconds: float) -> str:
    """Formate le temps en heures, minutes, secondes."""
    return str(datetime.timedelta(seconds=int(seconds)))

def generate_points(n_points: int, dims: int, low: float = 0.0, high: float = 1.0,
                    seed: int = 42, sort_axis: bool = False) -> np.ndarray:
    """
    Génère des points uniformes dans [low, high)^dims.

    Args:
        n_points: Nombre de points
        dims: Nombre de dimensions
        low: Borne inférieure
        high: Borne supérieure
        seed: Graine aléatoire
        sort_axis: Trier les points sur le premier axe (pire cas de la sélection de médiane)

    Returns:
        np.ndarray: Tableau float32 (shape: [n_points, dims])
    """
    if n_points < 0 or dims < 1:
        raise ValueError(f"Paramètres invalides: n_points={n_points}, dims={dims}")
    if low > high:
        raise ValueError(f"Bornes invalides: low={low} > high={high}")

    rng = np.random.default_rng(seed)
    points = rng.uniform(low, high, size=(n_points, dims)).astype(np.float32)
    if sort_axis:
        points = points[np.argsort(points[:, 0], kind="stable")]
    return points

def generate_command(args: argparse.Namespace) -> int:
    """
    Commande pour générer un fichier de points.

    Args:
        args: Arguments de ligne de commande

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    total_start_time = time.time()

    try:
        print(f"🎲 Génération de points aléatoires...")
        print(f"  - Sortie: {args.out_points}")
        print(f"  - Nombre de points: {args.n:,}")
        print(f"  - Dimensions: {args.dims}")
        print(f"  - Intervalle: [{args.low}, {args.high})")
        print(f"  - Tri sur l'axe 0: {'Activé' if args.sorted else 'Désactivé'}")

        points = generate_points(args.n, args.dims, args.low, args.high, args.seed, args.sorted)
        write_points(points, args.out_points)

        total_time = time.time() - total_start_time
        print(f"\n✓ Génération terminée en {format_time(total_time)}")
        print("\nPour construire un arbre avec ces points :")
        print(f"  python -m kdspace.cli build {args.out_points}")

    except Exception as e:
        print(f"\n❌ Erreur: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0
