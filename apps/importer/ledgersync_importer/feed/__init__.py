"""Feed cursor management."""
