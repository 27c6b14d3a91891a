"""Pure classification helpers used by the repair services."""
