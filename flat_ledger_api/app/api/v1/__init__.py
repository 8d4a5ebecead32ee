"""
Version 1 of the API.

Breaking changes to the invoke contract or the flat routes belong in a
new version subpackage.
"""
