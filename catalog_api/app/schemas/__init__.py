"""
Pydantic schema definitions for API payloads.

Items are stored in the data file using the same model the API returns
(``Item``); request payloads and derived views have their own models so
validation rules stay at the edge.
"""
