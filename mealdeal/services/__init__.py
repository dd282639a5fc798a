"""Search pipeline and business services."""
