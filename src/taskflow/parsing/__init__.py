"""Rule-based (local) parsing: dates, priority, names, single tasks and transcripts."""
