"""Storage backends, repositories and AI text-generation clients."""
