"""auth/ -- Identity verification, admin roster, and session handling for NotesVault.

Layer rule: auth/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/ or content/ at runtime.
api/ and content/ import from auth/, not the other way around.
"""
