"""HTTP/SSE transport."""
