"""Core infrastructure: configuration, logging, HTTP clients, exceptions."""
