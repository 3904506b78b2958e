# Supabase tables: user_static_tags, group_tags
# Tag ids come from app/config/interest_tags.py

"""
Expected Supabase table structure:

user_static_tags:
- user_id: uuid (foreign key to auth.users.id, not null)
- tag_id: text (catalog id, not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, tag_id)

group_tags:
- group_id: uuid (foreign key to groups.id, not null)
- tag_id: text (catalog id, not null)
- unique constraint on (group_id, tag_id)
"""
