"""Signing data models (fields, geometry, render request/result)."""
