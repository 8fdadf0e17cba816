"""Floor tracking application: tick pipeline, events, and command line entry point."""
