"""Kubernetes Recipes: static site pipeline for Markdown recipe documents."""

__version__ = "0.1.0"
