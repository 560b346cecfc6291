"""Map interaction controller: search, selection, routing and previews."""
