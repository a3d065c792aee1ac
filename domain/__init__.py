"""Pure domain entities for the settlement pipeline (no I/O)."""
