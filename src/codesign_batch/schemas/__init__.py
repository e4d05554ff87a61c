"""JSON schemas bundled with codesign_batch."""
