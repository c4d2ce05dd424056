"""Core storage management: config store, lifecycle manager, settings."""
