"""
Test fixtures for EiriniX extensions running inside a Kubernetes cluster.
"""

__version__ = "0.1.0"
