"""Note storage: file codec, store manager and HTTP routes."""
