"""HTTP API for exhibit curation."""
