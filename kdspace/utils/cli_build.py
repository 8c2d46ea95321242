"""
Module pour la construction d'arbres k-d.
"""

import time
import datetime
import argparse

from kdspace.builder.builder import build_kdtree

def format_time(seconds: float) -> str:
    """Formate le temps en heures, minutes, secondes."""
    return str(datetime.timedelta(seconds=int(seconds)))

def build_command(args: argparse.Namespace) -> int:
    """
    Commande pour construire un arbre équilibré.

    Args:
        args: Arguments de ligne de commande

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    total_start_time = time.time()

    try:
        print(f"🚀 Construction d'un arbre k-d équilibré...")
        print(f"  - Points: {args.points_file}")
        print(f"  - Sortie: {args.tree_file}")
        print(f"  - Dimensions: {args.dims if args.dims is not None else 'auto'}")
        print(f"  - Parcours itératif: {'Activé' if args.iterative else 'Désactivé'}")

        tree = build_kdtree(
            points=args.points_file,
            output_file=args.tree_file,
            dims=args.dims,
            iterative=args.iterative,
            verbose=True
        )

        if args.stats_file:
            tree.save_statistics(args.stats_file)
            print(f"✓ Statistiques écrites dans {args.stats_file}")

        total_time = time.time() - total_start_time
        print(f"\n✓ Construction de l'arbre terminée en {format_time(total_time)}")

        print("\nPour tester les requêtes dans cet arbre :")
        print(f"  python -m kdspace.cli test {args.points_file} {args.tree_file}")
        print(f"\nPour interroger une boîte :")
        print(f"  python -m kdspace.cli query {args.tree_file} --min 0 0 --max 0.5 0.5")

    except Exception as e:
        print(f"\n❌ Erreur: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0
