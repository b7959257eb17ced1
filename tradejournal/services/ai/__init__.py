"""AI collaborators."""
