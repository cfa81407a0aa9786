"""Background housekeeping managers."""
