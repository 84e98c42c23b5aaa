"""Directory module - read-only catalog introspection."""
