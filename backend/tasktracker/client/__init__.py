"""Client — session context, HTTP client, and the cached task view.

Invariants:
    - The client cache is never authoritative; it changes only after the API
      confirms a mutation
"""
