"""auth/ -- Authentication package for OrderDesk.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or sales/.
api/ imports from auth/, not the other way around.
"""
