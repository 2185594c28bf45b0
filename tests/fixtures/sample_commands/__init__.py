"""Command package used by the discovery tests."""
