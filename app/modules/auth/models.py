# Supabase Auth
# No custom tables are required - Supabase Auth handles registration,
# password login, JWT issuance and validation (auth.users).

"""
Supabase Auth calls used by this service:
- auth.sign_up() - Register new users; username goes to user_metadata
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Resolve the current user from a JWT (HTTP routes and the signaling socket)
- auth.sign_out() - Logout users

Display names shown in system messages ("<username> started a voice call")
are read from user_metadata.username.
"""
