"""Application composition: settings, adapter wiring, and the CLI entry point."""
