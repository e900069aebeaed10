"""External system adapters: tracking database and vector store."""
