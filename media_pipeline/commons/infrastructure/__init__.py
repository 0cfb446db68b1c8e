"""Storage providers: object storage, document database, vector database."""
