"""Domain layer: collection definitions and schema-driven services."""
