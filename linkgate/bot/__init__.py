"""Bot-side consumers of the permission checks."""
