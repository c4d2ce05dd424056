"""Services wrapping the container engine."""
