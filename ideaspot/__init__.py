"""
Core package for the IdeaSpot idea expansion function.

This package contains the components used by the Cloud Functions entrypoint
to validate a spoken-idea transcript, ask a language model to expand it into
a fixed set of sections, and return the structured result to the mobile app.
"""
