# 면접 후기 요청/응답 스키마

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, field_validator

MIN_YEAR = 2000

class ExperienceCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=255)
    college: str = Field(..., min_length=1, max_length=255)
    year: int
    profile: Dict[str, Any] = Field(default_factory=dict)
    wat_summary: Optional[str] = Field(None, max_length=5000)
    pi_questions: List[str] = Field(default_factory=list)
    final_remarks: Optional[str] = Field(None, max_length=1000)
    is_anonymous: bool = False

    @field_validator("year")
    @classmethod
    def year_in_range(cls, v: int) -> int:
        current = datetime.now(tz=timezone.utc).year
        if v < MIN_YEAR or v > current:
            raise ValueError(f"year must be between {MIN_YEAR} and {current}")
        return v

    @field_validator("title", "college")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

class ExperienceOut(BaseModel):
    id: str
    title: str
    college: str
    year: int
    profile: Dict[str, Any]
    wat_summary: Optional[str] = None
    pi_questions: List[str]
    final_remarks: Optional[str] = None
    is_anonymous: bool
    is_verified: bool
    views: int
    upvotes: int
    # 익명 후기는 작성자 정보를 숨깁니다
    author_id: Optional[str] = None
    author_name: Optional[str] = None
    created_at: datetime

class HelpfulResult(BaseModel):
    is_helpful: bool
    upvotes: int

class VerificationUpdate(BaseModel):
    is_verified: bool

class AdminStats(BaseModel):
    total_experiences: int
    total_verified_experiences: int
    pending_experiences: int
    total_colleges: int

class CollegeSummary(BaseModel):
    name: str
    experience_count: int

class CollegeStats(BaseModel):
    college: str
    total: int
    avg_cat_percentile: float
    avg_work_experience: float
    avg_questions: float
