"""Infrastructure: persistence, cache, console client and security adapters."""
