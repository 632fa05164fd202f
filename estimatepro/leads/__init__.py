"""Survey submissions and lead handling."""
