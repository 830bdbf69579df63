"""
Shared utility functions.

This subpackage includes:
- loading of the run configuration (config/train.yaml)
- seeding and reproducibility helpers
- filesystem helpers
- lightweight logging helpers used across the project.
"""
