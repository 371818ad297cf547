"""modules — planning, routing and popularity components of the engine."""
