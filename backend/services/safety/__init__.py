"""Post-generation checks for AI-written cover letters."""
