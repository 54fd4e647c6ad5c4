"""Domain services over the document store."""
