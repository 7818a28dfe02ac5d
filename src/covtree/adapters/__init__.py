"""Report-format adapters producing leaf facts for the engine."""
