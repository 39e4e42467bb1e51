"""
Task Performance

Completion, quality and efficiency metrics over task records, plus per-staff
scorecards bucketed into performance tiers.
"""

from typing import Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass, field
from enum import Enum

from savorsync.schemas.task import Task, TaskCategory, TaskStatus
from savorsync.schemas.labor import StaffMember
from savorsync.services.scope import safe_ratio, percentage
from savorsync.services.rankings import rank_records
from savorsync.config import get_settings


class PerformanceTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"


@dataclass
class CategoryBreakdown:
    category: TaskCategory
    total: int
    completed: int

    @property
    def completion_rate(self) -> float:
        return percentage(self.completed, self.total)

    def to_dict(self) -> Dict:
        return {
            "category": self.category.value,
            "total": self.total,
            "completed": self.completed,
            "completion_rate": round(self.completion_rate, 2),
        }


@dataclass
class TaskMetrics:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    overdue: int = 0
    cancelled: int = 0
    completion_rate: float = 0.0
    on_time_rate: float = 0.0
    average_quality_score: float = 0.0
    efficiency: float = 100.0
    by_category: List[CategoryBreakdown] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "total": self.total,
            "completed": self.completed,
            "in_progress": self.in_progress,
            "pending": self.pending,
            "overdue": self.overdue,
            "cancelled": self.cancelled,
            "completion_rate": round(self.completion_rate, 2),
            "on_time_rate": round(self.on_time_rate, 2),
            "average_quality_score": round(self.average_quality_score, 1),
            "efficiency": round(self.efficiency, 2),
            "by_category": [category.to_dict() for category in self.by_category],
        }


@dataclass
class StaffTaskPerformance:
    staff_id: str
    staff_name: str
    tasks_assigned: int
    tasks_completed: int
    completion_rate: float
    on_time_rate: float
    average_quality_score: Optional[float]
    composite_score: float
    tier: PerformanceTier
    improvement_areas: List[str] = field(default_factory=list)
    rank: int = 0

    def to_dict(self) -> Dict:
        return {
            "staff_id": self.staff_id,
            "staff_name": self.staff_name,
            "tasks_assigned": self.tasks_assigned,
            "tasks_completed": self.tasks_completed,
            "completion_rate": round(self.completion_rate, 2),
            "on_time_rate": round(self.on_time_rate, 2),
            "average_quality_score": (
                round(self.average_quality_score, 1) if self.average_quality_score is not None else None
            ),
            "composite_score": round(self.composite_score, 2),
            "tier": self.tier.value,
            "improvement_areas": self.improvement_areas,
            "rank": self.rank,
        }


def _average_quality(tasks: Sequence[Task]) -> Optional[float]:
    scores = [
        task.quality_score for task in tasks
        if task.status == TaskStatus.COMPLETED and task.quality_score is not None
    ]
    if not scores:
        return None
    return sum(scores) / len(scores)


def _efficiency(tasks: Sequence[Task]) -> float:
    """Mean estimated/actual duration ratio over completed tasks, as a percentage."""
    ratios = [
        task.estimated_duration / task.actual_duration
        for task in tasks
        if task.status == TaskStatus.COMPLETED and task.actual_duration
    ]
    if not ratios:
        return 100.0
    return sum(ratios) / len(ratios) * 100


def calculate_task_metrics(tasks: Sequence[Task]) -> TaskMetrics:
    counts = {status: 0 for status in TaskStatus}
    for task in tasks:
        counts[task.status] += 1

    completed = counts[TaskStatus.COMPLETED]
    on_time = sum(1 for task in tasks if task.completed_on_time)

    by_category = []
    for category in TaskCategory:
        category_tasks = [task for task in tasks if task.category == category]
        by_category.append(CategoryBreakdown(
            category=category,
            total=len(category_tasks),
            completed=sum(1 for task in category_tasks if task.status == TaskStatus.COMPLETED),
        ))

    return TaskMetrics(
        total=len(tasks),
        completed=completed,
        in_progress=counts[TaskStatus.IN_PROGRESS],
        pending=counts[TaskStatus.PENDING],
        overdue=counts[TaskStatus.OVERDUE],
        cancelled=counts[TaskStatus.CANCELLED],
        completion_rate=percentage(completed, len(tasks)),
        on_time_rate=percentage(on_time, completed),
        average_quality_score=_average_quality(tasks) or 0.0,
        efficiency=_efficiency(tasks),
        by_category=by_category,
    )


def assign_tier(
    score: float,
    platinum: float,
    gold: float,
    silver: float
) -> PerformanceTier:
    if score >= platinum:
        return PerformanceTier.PLATINUM
    if score >= gold:
        return PerformanceTier.GOLD
    if score >= silver:
        return PerformanceTier.SILVER
    return PerformanceTier.BRONZE


def staff_task_performance(
    tasks: Iterable[Task],
    staff: Iterable[StaffMember],
    limit: Optional[int] = None
) -> List[StaffTaskPerformance]:
    """
    Scorecard per staff member with at least one assigned task.

    The composite score is the mean of completion rate, on-time rate and
    quality score scaled to 100 (quality is left out when no completed task
    was scored). Cancelled tasks do not count as assigned.
    """
    settings = get_settings()
    tasks_by_staff: Dict[str, List[Task]] = {}
    for task in tasks:
        if task.assigned_to is None or task.status == TaskStatus.CANCELLED:
            continue
        tasks_by_staff.setdefault(task.assigned_to, []).append(task)

    scorecards = []
    for member in staff:
        assigned = tasks_by_staff.get(member.id)
        if not assigned:
            continue

        completed = sum(1 for task in assigned if task.status == TaskStatus.COMPLETED)
        completion_rate = percentage(completed, len(assigned))
        on_time_rate = percentage(sum(1 for task in assigned if task.completed_on_time), completed)
        quality = _average_quality(assigned)

        components = {"completion_rate": completion_rate, "on_time_rate": on_time_rate}
        if quality is not None:
            components["quality"] = quality * 10
        composite = safe_ratio(sum(components.values()), len(components))

        scorecards.append(StaffTaskPerformance(
            staff_id=member.id,
            staff_name=member.full_name,
            tasks_assigned=len(assigned),
            tasks_completed=completed,
            completion_rate=completion_rate,
            on_time_rate=on_time_rate,
            average_quality_score=quality,
            composite_score=composite,
            tier=assign_tier(composite, settings.tier_platinum, settings.tier_gold, settings.tier_silver),
            improvement_areas=[name for name, value in components.items() if value < settings.tier_silver],
        ))

    return rank_records(scorecards, "composite_score", limit)
