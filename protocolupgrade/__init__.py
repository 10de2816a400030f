# MIT License
# Copyright (c) 2025 Hashborn

"""Build and submit governance transactions for rollup protocol upgrades."""

__version__ = "0.1.0"
