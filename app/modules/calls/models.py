# Supabase tables: call_sessions, call_participants
# Signaling state (who is connected to which call) lives in process memory, see signaling.py

"""
Expected Supabase table structure:

call_sessions:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- started_by: uuid (foreign key to auth.users.id, not null)
- is_active: bool (default: true) - at most one active session per group
- started_at: timestamp (not null)
- ended_at: timestamp (nullable)

call_participants:
- call_id: uuid (foreign key to call_sessions.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- joined_at: timestamp (not null)
- left_at: timestamp (nullable)
"""
