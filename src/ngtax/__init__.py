"""ngtax: personal income tax computation service."""
