"""
HTTP layer for the user directory.

Routers are mounted by web.main.create_app(); they hold no business rules.
"""
