"""
Training pipelines.

This subpackage includes the config-driven end-to-end classifier
training and evaluation entry point.
"""
