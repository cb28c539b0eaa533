"""Domain rules and exception hierarchy shared across layers."""
