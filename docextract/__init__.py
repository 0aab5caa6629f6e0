"""Text extraction from uploaded documents and images."""
