"""Station market simulation and trade route analysis for a space-trading game."""
