"""
Text preprocessing and feature extraction utilities.

This subpackage includes:
- tokenization ("simple" and "social" modes)
- cleaning rules, stopword removal and lemmatization
- vocabulary and sparse document-term matrix construction
- sparse-term filtering and tf-idf weighting
- the FeaturePipeline wiring all of the above together.
"""
