"""Post-processing of quasi-potential surfaces."""
