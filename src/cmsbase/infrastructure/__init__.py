"""Infrastructure layer: persistence, identity provider and HTTP API."""
