"""modules/observability — structured JSONL logging."""
