"""DeployStack backend with a pluggable feature runtime."""

__version__ = "0.1.0"
