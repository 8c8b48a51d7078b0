"""Template compilation, rendering and output writing."""
