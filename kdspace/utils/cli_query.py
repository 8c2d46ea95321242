"""
Module pour les requêtes par boîte en ligne de commande.
"""

import time
import argparse
from typing import List

from kdspace.io.reader import file_exists, load_tree

def format_points(points: List[tuple], limit: int) -> str:
    """
    Formate les points trouvés pour l'affichage en terminal.

    Args:
        points: Points trouvés
        limit: Nombre maximal de points affichés (0 pour tous)

    Returns:
        str: Résultats formatés
    """
    shown = points if limit <= 0 else points[:limit]
    output = ["\n📋 Résultats:"]
    for i, point in enumerate(shown, 1):
        coords = ", ".join(f"{v:.6g}" for v in point)
        output.append(f"  {i}. ({coords})")
    if len(shown) < len(points):
        output.append(f"  ... {len(points) - len(shown):,} points supplémentaires")
    return "\n".join(output)

def query_command(args: argparse.Namespace) -> int:
    """
    Commande pour récupérer les points d'une boîte.

    Args:
        args: Arguments de ligne de commande

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    try:
        if not file_exists(args.tree_file):
            print(f"❌ Fichier d'arbre introuvable: {args.tree_file}")
            return 1

        tree = load_tree(args.tree_file, strict=args.strict, iterative=args.iterative)

        if len(args.min) != tree.k or len(args.max) != tree.k:
            print(f"❌ La boîte doit avoir {tree.k} coordonnées par coin")
            return 1

        print(f"🔍 Requête dans la boîte {tuple(args.min)} → {tuple(args.max)}")
        start = time.time()
        points = tree.query(args.min, args.max)
        elapsed = time.time() - start

        print(format_points(points, args.limit))
        print(f"\n✓ {len(points):,} points trouvés en {elapsed*1000:.2f} ms")

    except Exception as e:
        print(f"\n❌ Erreur: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0
