"""HTTP and websocket surface for the Flip 7 table."""
