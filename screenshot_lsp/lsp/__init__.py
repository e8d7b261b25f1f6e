"""Language Server Protocol adapter."""
