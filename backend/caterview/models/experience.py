# 면접 후기 모델 (Beanie Document)
# - 작성자(user_id), 학교명, 연도, 지원자 프로필, WAT/PI 내용
# - is_verified: 관리자 승인 여부 (제출 시 False)
# - upvotes / upvoted_by: "도움이 됐어요" 토글

from datetime import datetime
from typing import Any, Dict, List, Optional
from beanie import Document, Indexed
from pydantic import Field
import pymongo

from .user import utcnow


class InterviewExperience(Document):
    user_id: Indexed(str)
    college: Indexed(str)
    year: Indexed(int)
    title: str
    profile: Dict[str, Any] = Field(default_factory=dict)
    wat_summary: Optional[str] = None
    pi_questions: List[str] = Field(default_factory=list)
    final_remarks: Optional[str] = None
    is_anonymous: bool = False
    is_verified: bool = False

    views: int = 0
    upvotes: int = 0
    upvoted_by: List[str] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    class Settings:
        name = "interview_experiences"
        indexes = [
            [("is_verified", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)],
        ]
