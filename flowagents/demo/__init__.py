"""Demo agents and stream sources."""
