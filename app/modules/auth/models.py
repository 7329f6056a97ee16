# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
The identity client relies on:
- auth.sign_up() - Register new users; user_metadata carries name and role
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Current user of the client's session
- auth.sign_out() - End the client's session
- auth.on_auth_state_change() - INITIAL_SESSION, SIGNED_IN, SIGNED_OUT, ... events

The application's own copy of each user lives in the users table
(see app/modules/users/models.py), written by POST /api/auth/sync-user.
"""
