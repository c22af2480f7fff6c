"""Qt widgets for PhotoGrid."""
