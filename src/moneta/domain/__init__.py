"""Domain layer for moneta application."""
