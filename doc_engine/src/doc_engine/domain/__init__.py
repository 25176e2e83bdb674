"""Document engine domain layer."""
