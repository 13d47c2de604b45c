"""
Pydantic data structures shared across the package: documents, the request and response envelopes of the action
API, and the summary results some actions return.
"""
