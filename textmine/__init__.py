"""
Top-level package for the social-media and legislative text mining project.

This package contains modules for:
- corpus loading, retweet pre-filtering and train/test splitting
- tokenization, cleaning and lemmatization
- the document-term feature pipeline (vocabulary, sparse counts,
  sparsity filtering and tf-idf weighting)
- lexicon-based sentiment scoring
- a random-forest classifier over the document-term matrix
- evaluation metrics and shared helper functions
"""

__version__ = "0.1.0"
