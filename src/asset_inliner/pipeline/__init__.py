"""Sequential step pipeline and its concrete steps."""
