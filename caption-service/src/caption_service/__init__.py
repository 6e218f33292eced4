"""Image upload and caption generation service."""
