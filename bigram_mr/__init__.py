"""
Bigram relative-frequency estimation as a MapReduce job.
"""

__version__ = "0.1.0"
