"""Console output and command-line host."""
