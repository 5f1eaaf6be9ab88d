"""Request and response schemas for the inkmatch API."""
