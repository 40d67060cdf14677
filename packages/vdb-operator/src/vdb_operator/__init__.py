"""
VerticaDB reconciliation engine.

Drives a database cluster running as stateful pods toward its declared
spec through an ordered pipeline of idempotent reconcile actors, each
working from a PodFacts snapshot rebuilt at the start of every pass.
"""

__version__ = "0.1.0"
