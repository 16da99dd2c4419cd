"""items/ -- Personal items and the owner-scoped store that guards them.

Layer rule: items/ imports only stdlib, third-party libraries, and core/.
It never resolves identities itself -- callers pass the authenticated owner id.
"""
