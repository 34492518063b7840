"""Command line interfaces for pasta."""
