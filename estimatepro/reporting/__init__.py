"""Quote formatting and PDF export."""
