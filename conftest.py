"""Racine des tests : rend le paquet kdspace importable depuis le dépôt."""
