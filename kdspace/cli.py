"""
Interface en ligne de commande pour KDSpace.
Fournit des commandes pour générer des points, construire des arbres,
interroger une boîte et tester la justesse des requêtes.
"""

import sys
import argparse

from kdspace import __version__
from kdspace.utils.config import ConfigManager
from kdspace.utils.cli_build import build_command
from kdspace.utils.cli_evaluate import evaluate_command
from kdspace.utils.cli_generate import generate_command
from kdspace.utils.cli_query import query_command

def _config_path(argv) -> str:
    """Récupère --config avant l'analyse complète, pour les valeurs par défaut."""
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default=None)
    pre_args, _ = pre_parser.parse_known_args(argv)
    return pre_args.config

def build_parser(config_manager: ConfigManager) -> argparse.ArgumentParser:
    """
    Construit le parseur d'arguments avec les valeurs par défaut de la configuration.

    Args:
        config_manager: Gestionnaire de configuration

    Returns:
        argparse.ArgumentParser: Le parseur principal
    """
    build_config = config_manager.get_section("build_tree")
    query_config = config_manager.get_section("query")
    generate_config = config_manager.get_section("generate")

    # Définir les chemins par défaut
    default_points_path = config_manager.get_file_path("default_points")
    default_tree_path = config_manager.get_file_path("default_tree")

    # Parseur principal
    parser = argparse.ArgumentParser(
        description="KDSpace - Arbre k-d équilibré pour les requêtes par boîte",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument("--config", default=config_manager.config_path,
                        help="Chemin vers le fichier de configuration")
    parser.add_argument("--version", action="version", version=f"KDSpace v{__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commandes disponibles")

    # Commande generate
    generate_parser = subparsers.add_parser("generate", help="Générer un fichier de points aléatoires")
    generate_parser.add_argument("out_points", nargs="?", default=default_points_path,
                                 help="Fichier binaire de sortie")
    generate_parser.add_argument("--n", type=int, default=generate_config["n_points"],
                                 help="Nombre de points")
    generate_parser.add_argument("--dims", type=int, default=generate_config["dims"],
                                 help="Nombre de dimensions")
    generate_parser.add_argument("--low", type=float, default=generate_config["low"],
                                 help="Borne inférieure des coordonnées")
    generate_parser.add_argument("--high", type=float, default=generate_config["high"],
                                 help="Borne supérieure des coordonnées")
    generate_parser.add_argument("--seed", type=int, default=generate_config["seed"],
                                 help="Graine aléatoire")
    generate_parser.add_argument("--sorted", action="store_true", default=generate_config["sorted"],
                                 help="Trier les points sur le premier axe")
    generate_parser.set_defaults(func=generate_command)

    # Commande build
    build_cmd_parser = subparsers.add_parser("build", help="Construire un arbre équilibré")
    build_cmd_parser.add_argument("points_file", nargs="?", default=default_points_path,
                                  help="Fichier binaire contenant les points")
    build_cmd_parser.add_argument("tree_file", nargs="?", default=default_tree_path,
                                  help="Fichier de sortie pour l'arbre")
    build_cmd_parser.add_argument("--dims", type=int, default=None,
                                  help="Nombre de dimensions attendu (déduit du fichier sinon)")
    build_cmd_parser.add_argument("--iterative", action="store_true", default=build_config["iterative"],
                                  help="Utiliser des piles explicites au lieu de la récursion")
    build_cmd_parser.add_argument("--stats_file", default=None,
                                  help="Fichier texte où écrire les statistiques de l'arbre")
    build_cmd_parser.set_defaults(func=build_command)

    # Commande query
    query_parser = subparsers.add_parser("query", help="Récupérer les points d'une boîte")
    query_parser.add_argument("tree_file", nargs="?", default=default_tree_path,
                              help="Fichier de l'arbre")
    query_parser.add_argument("--min", type=float, nargs="+", required=True,
                              help="Coin inférieur de la boîte")
    query_parser.add_argument("--max", type=float, nargs="+", required=True,
                              help="Coin supérieur de la boîte")
    query_parser.add_argument("--limit", type=int, default=20,
                              help="Nombre maximal de points affichés (0 pour tous)")
    query_parser.add_argument("--strict", action="store_true", default=query_config["strict_restore"],
                              help="Rejeter un fichier d'arbre tronqué")
    query_parser.add_argument("--iterative", action="store_true", default=build_config["iterative"],
                              help="Restaurer et interroger avec des piles explicites")
    query_parser.set_defaults(func=query_command)

    # Commande test
    test_parser = subparsers.add_parser("test", help="Comparer les requêtes à une recherche naïve")
    test_parser.add_argument("points_file", nargs="?", default=default_points_path,
                             help="Fichier binaire contenant les points")
    test_parser.add_argument("tree_file", nargs="?", default=default_tree_path,
                             help="Fichier de l'arbre à tester")
    test_parser.add_argument("--queries", type=int, default=query_config["queries"],
                             help="Nombre de boîtes aléatoires")
    test_parser.add_argument("--box_fraction", type=float, default=query_config["box_fraction"],
                             help="Largeur des boîtes en fraction de l'étendue")
    test_parser.add_argument("--n_jobs", type=int, default=query_config["n_jobs"],
                             help="Nombre de workers pour les requêtes")
    test_parser.add_argument("--seed", type=int, default=generate_config["seed"],
                             help="Graine aléatoire des boîtes")
    test_parser.add_argument("--strict", action="store_true", default=query_config["strict_restore"],
                             help="Rejeter un fichier d'arbre tronqué")
    test_parser.add_argument("--iterative", action="store_true", default=build_config["iterative"],
                             help="Restaurer et interroger avec des piles explicites")
    test_parser.set_defaults(func=evaluate_command)

    return parser

def main(argv=None) -> int:
    """
    Point d'entrée principal pour l'interface en ligne de commande.

    Returns:
        int: Code de retour (0 pour succès, autre pour erreur)
    """
    config_manager = ConfigManager(_config_path(argv))
    parser = build_parser(config_manager)

    args = parser.parse_args(argv)

    if hasattr(args, "func"):
        return args.func(args)
    else:
        parser.print_help()
        return 0

if __name__ == "__main__":
    sys.exit(main())
