"""Isolate the smallest set of examples that reproduces a failure."""
