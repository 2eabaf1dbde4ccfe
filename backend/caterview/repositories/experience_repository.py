# 면접 후기 저장소 레이어
# - 공개 목록(승인된 후기만), 내 후기, 승인 대기 목록
# - 조회수 증가와 추천 토글은 원자적 갱신($inc / $push / $pull)

from datetime import datetime
from typing import Any, Dict, List, Optional
from beanie import UpdateResponse
from beanie.operators import Inc, Set

from ..models.experience import InterviewExperience
from .user_repository import to_object_id


class ExperienceRepository:
    async def create(self, user_id: str, data: Dict[str, Any], now: datetime) -> InterviewExperience:
        experience = InterviewExperience(
            user_id=user_id,
            is_verified=False,
            created_at=now,
            updated_at=now,
            **data,
        )
        return await experience.insert()

    async def get(self, experience_id: str) -> Optional[InterviewExperience]:
        oid = to_object_id(experience_id)
        if oid is None:
            return None
        return await InterviewExperience.get(oid)

    async def list_verified(
        self,
        college: Optional[str] = None,
        year: Optional[int] = None,
        category: Optional[str] = None,
        min_percentile: Optional[float] = None,
        limit: int = 10,
        offset: int = 0,
    ) -> List[InterviewExperience]:
        query: Dict[str, Any] = {"is_verified": True}
        if college:
            query["college"] = college
        if year:
            query["year"] = year
        if category:
            query["profile.category"] = category
        if min_percentile is not None:
            query["profile.catPercentile"] = {"$gte": min_percentile}
        return await (
            InterviewExperience.find(query)
            .sort(-InterviewExperience.created_at)
            .skip(offset)
            .limit(limit)
            .to_list()
        )

    async def list_by_user(self, user_id: str) -> List[InterviewExperience]:
        return await (
            InterviewExperience.find(InterviewExperience.user_id == user_id)
            .sort(-InterviewExperience.created_at)
            .to_list()
        )

    async def list_admin(
        self,
        is_verified: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[InterviewExperience]:
        """관리자용 목록. is_verified가 None이면 전체, 최신순."""
        query: Dict[str, Any] = {} if is_verified is None else {"is_verified": is_verified}
        return await (
            InterviewExperience.find(query)
            .sort(-InterviewExperience.created_at)
            .skip(offset)
            .limit(limit)
            .to_list()
        )

    async def count(self, is_verified: Optional[bool] = None) -> int:
        query: Dict[str, Any] = {} if is_verified is None else {"is_verified": is_verified}
        return await InterviewExperience.find(query).count()

    async def distinct_colleges(self) -> List[str]:
        return await InterviewExperience.distinct("college")

    async def college_summaries(self) -> List[Dict[str, Any]]:
        """승인된 후기가 있는 학교별 후기 수 (이름순)"""
        rows = await InterviewExperience.find(InterviewExperience.is_verified == True).aggregate(  # noqa: E712
            [
                {"$group": {"_id": "$college", "count": {"$sum": 1}}},
                {"$sort": {"_id": 1}},
            ]
        ).to_list()
        return [{"name": r["_id"], "experience_count": r["count"]} for r in rows]

    async def college_stats(self, college: str) -> Dict[str, Any]:
        """승인된 후기 기준 학교 통계. 숫자가 아닌 프로필 값은 평균에서 제외됩니다."""
        rows = await InterviewExperience.find(
            InterviewExperience.is_verified == True,  # noqa: E712
            InterviewExperience.college == college,
        ).aggregate(
            [
                {"$project": {
                    "cat": "$profile.catPercentile",
                    "work": "$profile.workExperience",
                    "questions": {"$size": {"$ifNull": ["$pi_questions", []]}},
                }},
                {"$group": {
                    "_id": None,
                    "total": {"$sum": 1},
                    "avg_cat_percentile": {"$avg": "$cat"},
                    "avg_work_experience": {"$avg": "$work"},
                    "avg_questions": {"$avg": "$questions"},
                }},
            ]
        ).to_list()
        row = rows[0] if rows else {}
        return {
            "total": row.get("total", 0),
            "avg_cat_percentile": row.get("avg_cat_percentile") or 0,
            "avg_work_experience": row.get("avg_work_experience") or 0,
            "avg_questions": row.get("avg_questions") or 0,
        }

    async def increment_views(self, experience_id: str) -> Optional[InterviewExperience]:
        oid = to_object_id(experience_id)
        if oid is None:
            return None
        return await InterviewExperience.find_one(InterviewExperience.id == oid).update(
            Inc({InterviewExperience.views: 1}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def add_upvote(self, experience_id: str, user_id: str) -> Optional[InterviewExperience]:
        """아직 추천하지 않은 경우에만 추가합니다. 이미 추천했다면 None."""
        oid = to_object_id(experience_id)
        if oid is None:
            return None
        return await InterviewExperience.find_one({"_id": oid, "upvoted_by": {"$ne": user_id}}).update(
            {"$push": {"upvoted_by": user_id}, "$inc": {"upvotes": 1}},
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def remove_upvote(self, experience_id: str, user_id: str) -> Optional[InterviewExperience]:
        oid = to_object_id(experience_id)
        if oid is None:
            return None
        return await InterviewExperience.find_one({"_id": oid, "upvoted_by": user_id}).update(
            {"$pull": {"upvoted_by": user_id}, "$inc": {"upvotes": -1}},
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def set_verified(self, experience_id: str, is_verified: bool, now: datetime) -> Optional[InterviewExperience]:
        oid = to_object_id(experience_id)
        if oid is None:
            return None
        return await InterviewExperience.find_one(InterviewExperience.id == oid).update(
            Set({InterviewExperience.is_verified: is_verified, InterviewExperience.updated_at: now}),
            response_type=UpdateResponse.NEW_DOCUMENT,
        )

    async def delete(self, experience_id: str) -> bool:
        experience = await self.get(experience_id)
        if experience is None:
            return False
        await experience.delete()
        return True


def get_experience_repository() -> ExperienceRepository:
    return ExperienceRepository()
