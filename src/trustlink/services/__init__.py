"""Domain services for the verification workflow."""
