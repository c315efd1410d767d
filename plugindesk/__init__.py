"""plugindesk — discovery and aggregation of local plugin-development projects."""

__version__ = "0.1.0"
