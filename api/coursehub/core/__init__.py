"""Cross-cutting infrastructure: errors, logging, request context, database."""
