"""Infrastructure adapters: database and outbound wallet HTTP."""
