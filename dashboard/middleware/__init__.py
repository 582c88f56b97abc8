"""Request middleware: logging, timing and rate limits."""
