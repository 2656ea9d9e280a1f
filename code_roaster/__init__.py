"""Upload source files, get an LLM code review back, keep history and bookmarks."""
