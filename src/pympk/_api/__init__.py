"""Provider endpoint modules (internal)."""
