"""HTTP routers: health, session and record collections."""
