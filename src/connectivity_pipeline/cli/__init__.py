"""Command line interface for connectivity-pipeline."""
