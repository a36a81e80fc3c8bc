"""
Use Cases

Organized into domain folders:
- auth/: Login, logout, current user context
- users/: Admin user management
- roles/: Role management and assignment
- security/: Security alerts and the IP block list
- audit/: Audit log browsing
- dashboard/: Console overview and system health
"""
