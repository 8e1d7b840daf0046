"""Operator CLI for linkgate."""
