"""content/ -- Remote store client, admin roster and note mutators, listing.

Layer rule: content/ imports from core/ and auth/ (for Session and role
checks). It does NOT import from api/. api/ imports from content/, not the
other way around.
"""
