"""Repository adapters implementing the core interfaces."""
