"""auth/ -- Authentication and authorization package for ItemKeeper.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/, web/, or items/.
api/ and web/ import from auth/, not the other way around.
"""
