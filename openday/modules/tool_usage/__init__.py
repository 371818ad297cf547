"""modules/tool_usage — distance, time and campus-building primitives."""
