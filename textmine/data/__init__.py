"""
Corpus loading and dataset utilities.

This subpackage provides:
- functions to load a corpus CSV into Document records
- the retweet pre-filter applied ahead of tokenization
- train/test splitting with stratification for the classifier path.
"""
