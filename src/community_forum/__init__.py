"""Anonymous community forum: threaded comments and like tracking."""
