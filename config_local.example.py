# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env`. Only the names below are honoured.
"""

# Example: keep everything in memory while experimenting
# STORAGE_BACKEND = "memory"

# Example: start with an empty store
# SEED_DEMO_DATA = False
