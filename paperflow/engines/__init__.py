"""Read-side engines: search and statistics."""
