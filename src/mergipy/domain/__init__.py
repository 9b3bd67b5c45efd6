"""Domain layer: the reconciliation engine and the merger orchestration on top of it."""
