"""Readers turning library files into Python objects."""
