"""Domain models shared by matching, jobs, adapters and persistence."""
