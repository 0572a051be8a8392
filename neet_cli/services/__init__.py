"""Network clients for the completion provider and verification service."""
