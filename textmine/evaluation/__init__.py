"""
Evaluation utilities.

This subpackage includes classification metrics (accuracy, precision,
recall, F1, confusion matrix) for the document classifier.
"""
