"""Samba audit log interpretation and per-user operation metrics."""
