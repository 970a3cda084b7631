"""Read-only analyses over a parsed document."""
