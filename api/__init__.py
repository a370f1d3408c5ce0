"""Adaptive quiz HTTP service."""
