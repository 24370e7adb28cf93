"""HTTP API routers and error translation."""
