"""HTTP and WebSocket surface for running snake matches."""
