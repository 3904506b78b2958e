import json
import logging
import random
from datetime import datetime, timezone
from supabase import Client
from app.config import settings
from app.config.puzzles_config import DEFAULT_GROUP_QUESTIONS
from app.modules.groups.schemas import (
    GroupCreate, GroupResponse, GroupMemberResponse,
    QuizQuestion, QuizResponse, QuizSubmission, QuizResult
)
from typing import Any, Dict, List, Optional
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def normalize_options(raw: Any) -> List[str]:
    """group_puzzles.options is stored either as a JSON-encoded string or as a native array"""
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return [raw]
    if isinstance(raw, list):
        return [str(o) for o in raw]
    return []


def passing_score(min_correct_answers: int, served: int) -> int:
    """Correct answers needed to pass, never more than the questions a quiz actually serves"""
    return max(1, min(min_correct_answers, served))


def default_question_rows(group_id: str) -> List[Dict[str, Any]]:
    return [
        {
            "group_id": group_id,
            "question": q["question"],
            "options": json.dumps(q["options"]),
            "correct_answer": q["correct_answer"],
            "is_active": True,
        }
        for q in DEFAULT_GROUP_QUESTIONS
    ]


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _validate_group(self, group_data: GroupCreate) -> None:
        if not group_data.name.strip():
            raise HTTPException(status_code=400, detail="Group name is required")
        if len(group_data.questions) < 2:
            raise HTTPException(status_code=400, detail="You must create at least 2 questions")
        for question in group_data.questions:
            if not question.question.strip():
                raise HTTPException(status_code=400, detail="All questions must have content")
            if any(not option.strip() for option in question.options):
                raise HTTPException(status_code=400, detail="All question options must have content")
            if not 0 <= question.correct_answer < len(question.options):
                raise HTTPException(status_code=400, detail="Correct answer must point at one of the options")

    def create_group(self, group_data: GroupCreate, user_id: str) -> GroupResponse:
        """Create a quiz-gated group: group row, creator as admin, then its questions. Not atomic."""
        self._validate_group(group_data)
        total = len(group_data.questions)
        min_correct = passing_score(group_data.min_correct_answers, min(total, settings.quiz_max_questions))
        try:
            result = self.supabase.table("groups").insert({
                "name": group_data.name.strip(),
                "description": group_data.description,
                "created_by": user_id,
                "min_correct_answers": min_correct,
                "total_questions": total,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create group")
            group = result.data[0]

            self.add_member(group["id"], user_id, is_admin=True)

            self.supabase.table("group_puzzles").insert([
                {
                    "group_id": group["id"],
                    "question": q.question,
                    "options": q.options,
                    "correct_answer": q.correct_answer,
                    "is_active": True,
                }
                for q in group_data.questions
            ]).execute()

            logger.info(f"User {user_id} created group {group['id']} with {total} questions")
            return GroupResponse(**group)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating group: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while creating the group")

    def get_group_by_id(self, group_id: str) -> GroupResponse:
        """Get group by ID"""
        try:
            result = self.supabase.table("groups")\
                .select("*")\
                .eq("id", group_id)\
                .maybe_single()\
                .execute()

            if not result or not result.data:
                raise HTTPException(status_code=404, detail="Group not found")

            return GroupResponse(**result.data)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_groups_for_user(self, user_id: str, limit: int = 50, offset: int = 0) -> List[GroupResponse]:
        """Groups the user belongs to, most recent activity first"""
        try:
            members_result = self.supabase.table("group_members")\
                .select("group_id")\
                .eq("user_id", user_id)\
                .execute()
            if not members_result.data:
                return []
            group_ids = [m["group_id"] for m in members_result.data]
            result = self.supabase.table("groups")\
                .select("*")\
                .in_("id", group_ids)\
                .order("last_message_at", desc=True)\
                .limit(limit)\
                .offset(offset)\
                .execute()
            return [GroupResponse(**group) for group in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_group(self, group_id: str) -> bool:
        """Delete group and everything hanging off it"""
        try:
            calls_result = self.supabase.table("call_sessions")\
                .select("id")\
                .eq("group_id", group_id)\
                .execute()
            call_ids = [c["id"] for c in (calls_result.data or [])]
            if call_ids:
                self.supabase.table("call_participants")\
                    .delete()\
                    .in_("call_id", call_ids)\
                    .execute()

            for table in ("call_sessions", "group_puzzle_answers", "group_puzzles",
                          "messages", "group_tags", "group_members"):
                self.supabase.table(table)\
                    .delete()\
                    .eq("group_id", group_id)\
                    .execute()

            result = self.supabase.table("groups")\
                .delete()\
                .eq("id", group_id)\
                .execute()

            logger.info(f"Deleted group {group_id}")
            return len(result.data) > 0
        except Exception as e:
            logger.error(f"Error deleting group {group_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def add_member(self, group_id: str, user_id: str, is_admin: bool = False, joined_by_quiz: bool = False) -> Dict:
        """Insert a membership row; a second insert for the same pair is a conflict"""
        existing = self.supabase.table("group_members")\
            .select("user_id")\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .execute()
        if existing.data:
            raise HTTPException(status_code=409, detail="User is already a member of this group")

        result = self.supabase.table("group_members").insert({
            "group_id": group_id,
            "user_id": user_id,
            "is_admin": is_admin,
            "joined_by_quiz": joined_by_quiz,
        }).execute()

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to add member")
        return result.data[0]

    def add_members(self, group_id: str, user_ids: List[str], joined_by_quiz: bool = True) -> List[str]:
        """Bulk-add non-admin members, skipping users already in the group. Returns the ids inserted."""
        existing = self.supabase.table("group_members")\
            .select("user_id")\
            .eq("group_id", group_id)\
            .execute()
        present = {m["user_id"] for m in (existing.data or [])}
        to_add = [u for u in dict.fromkeys(user_ids) if u not in present]
        if not to_add:
            return []
        self.supabase.table("group_members").insert([
            {"group_id": group_id, "user_id": u, "is_admin": False, "joined_by_quiz": joined_by_quiz}
            for u in to_add
        ]).execute()
        return to_add

    def remove_member(self, group_id: str, user_id: str) -> bool:
        """Remove a member from the group"""
        try:
            result = self.supabase.table("group_members")\
                .delete()\
                .eq("group_id", group_id)\
                .eq("user_id", user_id)\
                .execute()

            return len(result.data) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_members(self, group_id: str) -> List[GroupMemberResponse]:
        """List all members of a group"""
        try:
            result = self.supabase.table("group_members")\
                .select("*")\
                .eq("group_id", group_id)\
                .execute()

            return [GroupMemberResponse(**member) for member in result.data]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def insert_default_questions(self, group_id: str) -> None:
        self.supabase.table("group_puzzles").insert(default_question_rows(group_id)).execute()

    def ensure_group_has_questions(self, group_id: str) -> bool:
        """Make sure the group has at least one active question; inserts the defaults when it has none"""
        if not group_id:
            return False
        try:
            group = self.supabase.table("groups")\
                .select("id")\
                .eq("id", group_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error loading group {group_id}: {e}")
            return False
        if not group or not group.data:
            logger.error(f"Group not found: {group_id}")
            return False

        try:
            questions = self._active_questions(group_id)
        except Exception as e:
            logger.error(f"Error checking questions: {e}")
            return False
        if questions:
            logger.debug(f"Group {group_id} already has {len(questions)} questions")
            return True

        try:
            self.insert_default_questions(group_id)
        except Exception as e:
            logger.error(f"Error adding questions to {group_id}: {e}")
            return False
        logger.info(f"Added default questions to group {group_id}")
        return True

    def _active_questions(self, group_id: str) -> List[Dict]:
        result = self.supabase.table("group_puzzles")\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("is_active", True)\
            .order("created_at", desc=True)\
            .execute()
        return result.data or []

    def _assert_not_member(self, group_id: str, user_id: str) -> None:
        existing = self.supabase.table("group_members")\
            .select("user_id")\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .execute()
        if existing.data:
            raise HTTPException(status_code=409, detail="You are already a member of this group")

    def get_quiz(self, group_id: str, user_id: str) -> QuizResponse:
        """Random sample of the group's active questions, correct answers withheld"""
        self._assert_not_member(group_id, user_id)
        group = self.get_group_by_id(group_id)
        try:
            questions = self._active_questions(group_id)
            if not questions and self.ensure_group_has_questions(group_id):
                questions = self._active_questions(group_id)
        except Exception as e:
            logger.error(f"Error fetching quiz for {group_id}: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while loading the group quiz")

        sample = random.sample(questions, min(len(questions), settings.quiz_max_questions))
        return QuizResponse(
            group_id=group.id,
            group_name=group.name,
            min_correct_answers=passing_score(group.min_correct_answers, len(sample)),
            questions=[
                QuizQuestion(id=q["id"], question=q["question"], options=normalize_options(q.get("options")))
                for q in sample
            ],
        )

    def submit_quiz(self, group_id: str, user_id: str, submission: QuizSubmission) -> QuizResult:
        """Score answers, record them, and admit the user when enough are correct"""
        self._assert_not_member(group_id, user_id)
        group = self.get_group_by_id(group_id)
        try:
            questions = {q["id"]: q for q in self._active_questions(group_id)}
        except Exception as e:
            logger.error(f"Error fetching questions for {group_id}: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while submitting your answers")

        required_count = min(len(questions), settings.quiz_max_questions)
        answers = submission.answers
        unknown = [qid for qid in answers if qid not in questions]
        if unknown:
            raise HTTPException(status_code=400, detail="Answers reference questions that are not part of this quiz")
        if len(answers) < required_count or len(answers) == 0:
            raise HTTPException(status_code=400, detail="Please answer all questions before submitting")
        if len(answers) > settings.quiz_max_questions:
            raise HTTPException(status_code=400, detail="Too many answers submitted")

        rows = []
        correct = 0
        for question_id, answer in answers.items():
            is_correct = answer == questions[question_id].get("correct_answer")
            if is_correct:
                correct += 1
            rows.append({
                "user_id": user_id,
                "group_id": group_id,
                "question_id": question_id,
                "user_answer": answer,
                "is_correct": is_correct,
            })

        try:
            self.supabase.table("group_puzzle_answers").insert(rows).execute()
        except Exception as e:
            logger.error(f"Error saving answers of {user_id} for {group_id}: {e}")
            raise HTTPException(status_code=500, detail="An error occurred while submitting your answers")

        required = passing_score(group.min_correct_answers, len(rows))
        passed = correct >= required
        if passed:
            self.add_member(group_id, user_id, is_admin=False, joined_by_quiz=True)
            logger.info(f"User {user_id} passed the quiz of {group_id} ({correct}/{len(rows)})")

        return QuizResult(score=correct, total=len(rows), required=required, passed=passed)

    def touch_last_message(self, group_id: str, when: Optional[str] = None) -> None:
        self.supabase.table("groups")\
            .update({"last_message_at": when or datetime.now(timezone.utc).isoformat()})\
            .eq("id", group_id)\
            .execute()
