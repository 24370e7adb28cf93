"""Core interfaces (ports) shared across layers."""
