"""Utility helpers shared across iphotolib."""
