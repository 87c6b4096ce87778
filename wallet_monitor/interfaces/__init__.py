"""Inbound interfaces: HTTP routers and the SSE hub."""
