"""JSON schemas bundled with Folio."""
