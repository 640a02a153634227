"""BrickBase — residential tenancy management backend.

Tracks apartments, rental agreements, residents, announcements, coupons
and rent payments. The heart of the service is the agreement lifecycle
and the role-based access checks that gate every route.
"""

__version__ = "0.1.0"
