"""HTTP API over reading sessions."""
