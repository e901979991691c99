"""Cross-cutting infrastructure: configuration, extensions, logging, errors, keys."""
