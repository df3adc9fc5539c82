"""Signing logic: transform, aspect fit, page rendering, assembly, service."""
