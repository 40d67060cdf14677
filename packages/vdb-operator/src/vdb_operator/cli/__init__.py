"""Command-line interface for vdb-operator."""
