"""HTTP API for quotes, valuations, and portfolio holdings."""
