# Supabase tables: groups, group_members, group_puzzles, group_puzzle_answers
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

groups:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- created_by: uuid (foreign key to auth.users.id, not null)
- min_correct_answers: int (not null, default: 1)
- total_questions: int (not null)
- is_interest_based: bool (default: false)
- is_active: bool (default: true)
- last_message_at: timestamp (nullable)
- created_at: timestamp (default: now())

group_members:
- group_id: uuid (foreign key to groups.id, not null)
- user_id: uuid (foreign key to auth.users.id, not null)
- is_admin: bool (default: false)
- joined_by_quiz: bool (default: false)
- joined_at: timestamp (default: now())
- unique constraint on (group_id, user_id)

group_puzzles:
- id: uuid (primary key)
- group_id: uuid (foreign key to groups.id, nullable - null means global)
- question: text (not null)
- options: jsonb - either a native array or a JSON-encoded string of one
- correct_answer: int (index into options)
- is_active: bool (default: true)
- created_at: timestamp (default: now())

group_puzzle_answers:
- user_id: uuid
- group_id: uuid
- question_id: uuid (foreign key to group_puzzles.id)
- user_answer: int
- is_correct: bool
- created_at: timestamp (default: now())
"""
