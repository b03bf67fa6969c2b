"""Global settings definitions, registry and service."""
