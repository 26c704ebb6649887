"""HTTP surface for the encounter UI."""
