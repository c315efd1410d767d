"""Engines — pure data-loading pipelines, no presentation concerns."""
