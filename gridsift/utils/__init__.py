"""Utility helpers for gridsift."""
