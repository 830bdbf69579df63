"""
Model definitions.

This subpackage includes the random forest builder used on document-term
features and helpers to read feature importances back per term.
"""
