"""Family directory service."""
