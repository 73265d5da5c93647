"""
Core business logic for the video catalog.

This module is framework-agnostic - it doesn't import FastAPI, boto3,
pymongo, or any infrastructure concerns. Adapters are handed in through
constructors, so the services can be tested with in-memory stores.
"""
