"""Cluster gateway backed by kubectl."""
