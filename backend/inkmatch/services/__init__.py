"""Service layer for inkmatch."""
