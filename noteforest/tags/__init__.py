"""Tag model and in-memory tag registry."""
