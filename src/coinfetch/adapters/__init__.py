"""Framework adapters for coinfetch."""
