"""Report model, reduction, diffing and persistence."""
