"""Archive construction core."""
