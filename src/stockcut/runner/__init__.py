"""Problem sets, experiment runner and command-line interface."""
