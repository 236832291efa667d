"""Concrete bundler and markup implementations of the application ports."""
