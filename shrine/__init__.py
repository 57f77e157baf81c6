"""Parse, validate and plan deployments of shrine manifests."""

__version__ = "0.1.0"