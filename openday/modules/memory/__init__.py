"""modules/memory — process-wide popularity counters."""
