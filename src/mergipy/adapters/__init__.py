"""Adapters connecting the merge engine to concrete storage and file formats."""
