"""schemas — catalogue records, route structures and recommendation results."""
