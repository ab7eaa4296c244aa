"""HTTP API for the MySQL agent."""
