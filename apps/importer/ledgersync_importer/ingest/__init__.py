"""Transaction decoding, writing and the import loop."""
