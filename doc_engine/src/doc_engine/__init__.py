"""
Document Engine - MongoDB-style queries over a plain document store

An in-process engine that evaluates filters and update operators against
documents fetched from a store that only knows get, put, scan, delete and
count.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
