"""HTTP API for the citation engine."""
