"""Landscape and decomposition plots."""
