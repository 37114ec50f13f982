"""Issue normalization, filtering, aggregation and rendering."""
