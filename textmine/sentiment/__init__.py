"""
Lexicon-based sentiment scoring.

This subpackage includes:
- loaders for score (AFINN-style) and category (Bing, NRC) lexicons
- per-document scoring over document-term counts
- aggregation of scores by label or date.
"""
