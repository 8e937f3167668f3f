"""Mock creation and per-call dispatch."""
