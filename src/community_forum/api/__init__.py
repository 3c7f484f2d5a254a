"""HTTP API for the community forum."""
