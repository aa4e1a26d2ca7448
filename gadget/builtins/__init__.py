"""
Routes the dispatcher installs in the default and permission-denied slots.

They are never matched by text, so they live here instead of under the
plugin root.
"""
