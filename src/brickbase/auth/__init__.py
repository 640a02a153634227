"""Authentication and authorization.

Learn: Two layers, composed per route:
1. Identity — a bearer ID token from the external identity provider is
   verified and turned into a Principal (email + subject).
2. Capability — the principal's stored role must exactly match the role
   the route requires (user, member or admin).
"""
