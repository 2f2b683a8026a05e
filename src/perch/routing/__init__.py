"""Routing: ``:param`` patterns matched first-match per method.

Routes are registered during setup and compiled into per-method tables
when the app freezes.
"""
