"""HTTP development node."""
