"""
error-triage: classify error reports (message + callstack) with TF-IDF
features and a small feed-forward network.
"""

__version__ = "1.0.0"
