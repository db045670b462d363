"""termforms: interactive multi-page terminal forms."""
