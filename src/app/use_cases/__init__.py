"""
Use Cases

Organized into domain folders:
- mobile_auth/: Applicant and referrer mobile exchange, refresh, logout, me
- admin/: Token epoch rotation, sign-out-everywhere, archive
"""
