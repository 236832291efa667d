"""Per-document asset inlining passes."""
