"""SbomLens: SBOM aggregation, diff and query engine."""
