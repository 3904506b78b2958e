# Supabase table: messages; storage bucket: chat-media

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- content: text (not null)
- is_meme: bool (default: false)
- media_url: text (nullable) - public URL in the chat-media bucket
- is_system_message: bool (default: false) - call started/ended/left notices
- created_at: timestamp (default: now())

Storage objects: chat-media/media/<group_id>/<user_id>-<random>.<ext>
"""
