"""Developer tooling: CLI entry points and report helpers."""
