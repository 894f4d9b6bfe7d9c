"""Action handler implementations, one per action type."""
