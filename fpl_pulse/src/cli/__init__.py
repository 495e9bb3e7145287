"""Command line tools for FPL Pulse."""
