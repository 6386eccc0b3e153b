"""Services module.

Services:
- auth.py: Registration and credential verification
- tokens.py: Token issuing, verification and revocation
- tasks.py: Task CRUD scoped to the owning user
"""
