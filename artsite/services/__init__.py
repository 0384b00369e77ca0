"""
Use cases behind the page.

Routers (FastAPI endpoints) call these services instead of touching the
store or the item tuples directly: editors mutate content, ingestion feeds
editors, the contact service builds the outbound mailto link.
"""
