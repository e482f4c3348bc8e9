"""Parameter groups and named example systems."""
