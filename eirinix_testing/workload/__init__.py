"""Lifecycle handles for fixture pods."""
