"""Infrastructure layer: auth, resilience, persistence, providers and the HTTP API."""
