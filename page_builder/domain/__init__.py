"""Domain layer: block registry and block list services."""
