"""Backend services for the ngtax calculator."""
