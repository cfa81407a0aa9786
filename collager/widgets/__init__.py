"""Qt widgets for the collage page."""
