"""taskflow: turn free-text task descriptions and meeting transcripts into structured tasks."""
