"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with recording steps.
Unit tests should be fast, deterministic, and focused.
"""
