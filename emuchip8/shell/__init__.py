"""Host-side services and rendering."""
