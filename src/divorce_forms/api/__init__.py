"""HTTP surface of the divorce forms system."""
