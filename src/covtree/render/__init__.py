"""Text and JSON renderers for coverage projections."""
