"""HTTP surface for the statistics core."""
