"""Test support: ORM models and parameter bags shared across test modules."""
