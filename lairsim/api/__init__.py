"""HTTP API for observing and controlling a running simulation."""
