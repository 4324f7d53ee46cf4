"""Background weather cache serving packed snapshots to a watch."""
