"""Command line interface for positions."""
