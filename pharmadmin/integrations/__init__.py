"""
Clients for the remote services the admin tooling talks to.
"""
