"""Task API: CRUD over a single tasks table."""
