"""Fixture factory: manager options, manifests and watchers."""
