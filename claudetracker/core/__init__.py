"""Domain types: clock, records, errors."""
