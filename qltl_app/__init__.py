"""Streamlit front-end for the QA evidence management system."""

__version__ = "1.0.0"
