# Supabase RPC functions used for matching
# The procedures live in the database; this service only calls them by name

"""
Expected Supabase functions:

create_static_tag_group(user_uuid uuid, min_tag_matches int, max_group_size int) -> uuid
- Places the user (whose tags are already in user_static_tags) into an existing
  interest group with room left, or creates one. Returns the group id or null.

search_groups_by_tags(search_tags text[]) -> setof record
- group_id uuid, name text, description text, match_percentage numeric

create_or_join_group(user_uuid uuid, responses jsonb) -> uuid
- Quiz-response based placement. Returns the group id or null when nothing fits.
"""
