"""Watch event relay."""
