"""RAG (Retrieval-Augmented Generation) pipeline components.

This package contains modules for:
- Catalog loading and listing rendering
- Catalog seeding into the vector index
- Pinecone and FAISS vector indexes
- Query composition from conversation history
- Retrieval with stock filtering, deduplication and re-ranking
- Answer generation
"""
