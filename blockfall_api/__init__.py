"""WebSocket bridge for browser renderers."""
