"""Cross-cutting infrastructure: logging and configuration."""
