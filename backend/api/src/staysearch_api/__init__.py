"""StaySearch REST API.

FastAPI application exposing hotel search, hotel details, per-room
availability and booking cancellation.
"""
