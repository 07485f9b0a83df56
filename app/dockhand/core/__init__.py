"""Convergence engine for dockhand.

Profile resolution, daemon configuration merging and orchestration.
"""
