"""
Accounts App Tests

This package contains tests for:
- test_auth_api.py: Registration, login/logout, JWT refresh and blacklisting
- test_profile_api.py: Own profile, avatar upload, admin user management
"""
