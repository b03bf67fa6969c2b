"""HTTP API of the DeployStack backend."""
