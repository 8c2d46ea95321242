"""
Module pour les tests de performance et de justesse.
Compare les requêtes de l'arbre à une recherche naïve sur des boîtes aléatoires.
"""

import argparse

from kdspace.io.reader import file_exists, read_points, load_tree
from kdspace.utils.evaluation import evaluate_tree, random_boxes

def evaluate_command(args: argparse.Namespace) -> int:
    """
    Commande pour tester les requêtes d'un arbre.

    Args:
        args: Arguments de ligne de commande

    Returns:
        int: Code de retour (0 pour succès, 1 pour erreur ou résultats incorrects)
    """
    try:
        print(f"🔍 Test de l'arbre k-d...")
        print(f"  - Points: {args.points_file}")
        print(f"  - Arbre: {args.tree_file}")
        print(f"  - Requêtes de test: {args.queries}")
        print(f"  - Taille des boîtes: {args.box_fraction * 100:.1f}% de l'étendue")
        print(f"  - Workers: {args.n_jobs}")

        if not file_exists(args.tree_file):
            print(f"❌ Fichier d'arbre introuvable: {args.tree_file}")
            return 1

        points = read_points(args.points_file)
        tree = load_tree(args.tree_file, strict=args.strict, iterative=args.iterative)

        if tree.k != points.shape[1]:
            print(f"❌ Dimensions incompatibles: arbre {tree.k}, points {points.shape[1]}")
            return 1

        boxes = random_boxes(points, args.queries, args.box_fraction, seed=args.seed)
        results = evaluate_tree(tree, points, boxes, n_jobs=args.n_jobs)

        print(f"\n✓ Évaluation terminée")
        print(f"  → Requêtes: {results['queries']}")
        print(f"  → Résultats incorrects: {results['mismatches']}")
        print(f"  → Points par requête: {results['avg_found']:.1f}")
        print(f"  → Temps moyen (arbre): {results['avg_tree_time']*1000:.3f} ms")
        print(f"  → Temps moyen (naïf): {results['avg_naive_time']*1000:.3f} ms")
        print(f"  → Accélération: {results['speedup']:.2f}x")

        if results["mismatches"]:
            print(f"❌ {results['mismatches']} requêtes diffèrent de la recherche naïve")
            return 1

    except Exception as e:
        print(f"\n❌ Erreur: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1

    return 0
