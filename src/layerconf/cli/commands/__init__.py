"""Top-level layerconf commands."""
