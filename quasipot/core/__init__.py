"""Core solver stack: grid, drift evaluation, marching, stitching, decomposition."""
