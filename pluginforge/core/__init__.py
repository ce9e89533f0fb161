"""Compile, load, discover and initialize extensions."""
