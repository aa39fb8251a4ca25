"""Utilities package for the pastry cost tracker application."""
