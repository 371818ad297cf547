"""modules/planning — routes, feasibility, recommendations and schedule advice."""
