"""docsync - Encrypted documents synchronized across storage backends."""
