"""Utility helpers for coinfetch."""
