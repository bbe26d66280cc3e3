"""HTTP routers for the bridge API."""
