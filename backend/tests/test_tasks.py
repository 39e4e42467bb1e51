"""
Tests for task metrics, scorecards and performance tiers.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from savorsync.schemas.task import TaskCategory, TaskStatus
from savorsync.services.tasks import (
    PerformanceTier,
    calculate_task_metrics,
    assign_tier,
    staff_task_performance,
)
from tests.factories import AS_OF, make_staff, make_task

EARLY = AS_OF - timedelta(hours=1)
LATE = AS_OF + timedelta(hours=1)


class TestTaskMetrics:

    def test_counts_and_rates(self):
        tasks = [
            make_task(completed_at=EARLY, actual=30, quality=8),
            make_task(completed_at=LATE, actual=60, quality=6),
            make_task(TaskStatus.OVERDUE),
            make_task(TaskStatus.PENDING, category=TaskCategory.TRAINING),
        ]
        metrics = calculate_task_metrics(tasks)

        assert metrics.total == 4
        assert metrics.completed == 2
        assert metrics.overdue == 1
        assert metrics.completion_rate == pytest.approx(50.0)
        assert metrics.on_time_rate == pytest.approx(50.0)
        assert metrics.average_quality_score == pytest.approx(7.0)
        # Mean of 30/30 and 30/60
        assert metrics.efficiency == pytest.approx(75.0)

    def test_category_breakdown(self):
        tasks = [make_task(completed_at=EARLY), make_task(TaskStatus.PENDING)]
        by_category = {entry.category: entry for entry in calculate_task_metrics(tasks).by_category}

        assert by_category[TaskCategory.CLEANING].total == 2
        assert by_category[TaskCategory.CLEANING].completion_rate == pytest.approx(50.0)
        assert by_category[TaskCategory.SALES].completion_rate == 0.0

    def test_empty(self):
        metrics = calculate_task_metrics([])

        assert metrics.completion_rate == 0.0
        assert metrics.on_time_rate == 0.0
        assert metrics.efficiency == 100.0

    def test_quality_score_range_validated(self):
        with pytest.raises(ValidationError):
            make_task(quality=11)


class TestTiers:

    @pytest.mark.parametrize("score,tier", [
        (95.0, PerformanceTier.PLATINUM),
        (90.0, PerformanceTier.PLATINUM),
        (89.9, PerformanceTier.GOLD),
        (70.0, PerformanceTier.SILVER),
        (69.99, PerformanceTier.BRONZE),
    ])
    def test_thresholds(self, score, tier):
        assert assign_tier(score, 90, 80, 70) == tier


class TestStaffScorecards:

    def test_scorecards_ranked_by_composite(self):
        staff = [make_staff("steady"), make_staff("star")]
        tasks = [
            make_task(assigned_to="star", completed_at=EARLY, quality=10),
            make_task(assigned_to="star", completed_at=EARLY, quality=10),
            make_task(assigned_to="steady", completed_at=LATE),
            make_task(TaskStatus.OVERDUE, assigned_to="steady"),
            make_task(TaskStatus.CANCELLED, assigned_to="steady"),
        ]
        scorecards = staff_task_performance(tasks, staff)

        star, steady = scorecards
        assert star.staff_id == "star"
        assert star.rank == 1
        assert star.composite_score == pytest.approx(100.0)
        assert star.tier == PerformanceTier.PLATINUM
        assert star.improvement_areas == []

        # Cancelled tasks are not counted as assigned
        assert steady.tasks_assigned == 2
        assert steady.composite_score == pytest.approx(25.0)
        assert steady.average_quality_score is None
        assert steady.tier == PerformanceTier.BRONZE
        assert steady.improvement_areas == ["completion_rate", "on_time_rate"]

    def test_staff_without_tasks_omitted(self):
        scorecards = staff_task_performance([make_task(assigned_to="a")], [make_staff("a"), make_staff("b")])
        assert [card.staff_id for card in scorecards] == ["a"]

    def test_limit(self):
        tasks = [make_task(assigned_to="a"), make_task(assigned_to="b")]
        assert len(staff_task_performance(tasks, [make_staff("a"), make_staff("b")], limit=1)) == 1
