"""Reactor-style TCP and HTTP toolkit: event loops, channels, buffers, an HTTP request parser and logging."""

__version__ = "0.1.0"