# backend/assetdb/apps/accounts/__init__.py
"""
Accounts app

Responsible for:
- Login accounts and roles (ADMIN / STAFF / VIEW_ONLY)
- Password login issuing JWT access tokens

Other apps depend on `assetdb.security` for "who is allowed to do what".
"""
