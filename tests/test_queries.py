"""Tests for list filters, task ordering and dashboard statistics."""

from datetime import date, datetime, timezone

import pytest

from relcrm.crm.models import Company, Contact, Task
from relcrm.crm.queries import (
    company_contacts,
    contacts_by_company,
    dashboard_stats,
    filter_companies,
    filter_contacts,
    filter_tasks,
    is_overdue,
    sort_tasks,
)


@pytest.fixture
def contacts():
    return [
        Contact(id="1", first_name="Ada", last_name="Lovelace", email="ada@engines.io",
                company="Analytical Engines", status="active", created_at="2026-10-02T09:00:00.000Z"),
        Contact(id="2", first_name="Grace", last_name="Hopper", email="grace@navy.mil",
                company="Navy", status="lead", created_at="2026-09-15T09:00:00.000Z"),
        Contact(id="3", first_name="Alan", last_name="Turing", email="alan@bletchley.uk",
                company="Analytical Engines", status="inactive", created_at="2026-10-10T09:00:00.000Z"),
    ]


@pytest.fixture
def tasks():
    return [
        Task(id="t1", title="Send deck", due_date="2026-11-05", priority="high", contact_name="Ada Lovelace"),
        Task(id="t2", title="Call Grace", due_date="2026-10-20", priority="low", completed=True),
        Task(id="t3", title="Follow up", description="about the engine", due_date="2026-10-25"),
        Task(id="t4", title="No date"),
    ]


class TestContactFilters:
    """Tests for filter_contacts."""

    @pytest.mark.parametrize(
        "search,expected",
        [
            ("ada", ["1"]),
            ("HOPPER", ["2"]),
            ("bletchley", ["3"]),
            ("analytical", ["1", "3"]),
            ("", ["1", "2", "3"]),
        ],
    )
    def test_search(self, contacts, search, expected):
        """Search matches name, email and company, case-insensitively."""
        assert [c.id for c in filter_contacts(contacts, search=search)] == expected

    def test_status_filter(self, contacts):
        """Status narrows the result."""
        assert [c.id for c in filter_contacts(contacts, status="lead")] == ["2"]


class TestCompanyQueries:
    """Tests for company filters and contact counts."""

    def test_filter_by_name_industry_and_status(self):
        """Companies match on name or industry and by status."""
        companies = [
            Company(id="a", name="Acme", industry="Manufacturing", status="active"),
            Company(id="b", name="Globex", industry="Energy"),
        ]

        assert [c.id for c in filter_companies(companies, search="energy")] == ["b"]
        assert [c.id for c in filter_companies(companies, status="active")] == ["a"]

    def test_contact_counts_by_company_name(self, contacts):
        """Contacts are counted by the company name typed on them."""
        assert contacts_by_company(contacts) == {"Analytical Engines": 2, "Navy": 1}

    def test_company_contacts(self, contacts):
        """A company's contacts are those naming it exactly."""
        company = Company(id="x", name="Navy")

        assert [c.id for c in company_contacts(company, contacts)] == ["2"]


class TestTaskQueries:
    """Tests for task filters and ordering."""

    def test_search_covers_description_and_contact(self, tasks):
        """Search matches title, description and contact name."""
        assert [t.id for t in filter_tasks(tasks, search="engine")] == ["t3"]
        assert [t.id for t in filter_tasks(tasks, search="lovelace")] == ["t1"]

    def test_status_uses_completed_flag(self, tasks):
        """pending/completed are judged by the completed flag."""
        assert [t.id for t in filter_tasks(tasks, status="completed")] == ["t2"]
        assert [t.id for t in filter_tasks(tasks, status="pending")] == ["t1", "t3", "t4"]

    def test_priority_filter(self, tasks):
        """Priority narrows the result."""
        assert [t.id for t in filter_tasks(tasks, priority="high")] == ["t1"]

    def test_unknown_status_rejected(self, tasks):
        """Only all/pending/completed are valid."""
        with pytest.raises(ValueError):
            filter_tasks(tasks, status="in-progress")

    def test_sort_incomplete_first_then_due_date(self, tasks):
        """Open tasks come first by due date; undated ones last in their group."""
        assert [t.id for t in sort_tasks(tasks)] == ["t3", "t1", "t4", "t2"]

    @pytest.mark.parametrize(
        "due,completed,expected",
        [
            ("2026-10-18", False, True),
            ("2026-10-19", False, False),
            ("2026-10-18", True, False),
            ("", False, False),
        ],
    )
    def test_is_overdue(self, due, completed, expected):
        """Open tasks due before today are overdue."""
        task = Task(title="Call", due_date=due, completed=completed)

        assert is_overdue(task, today=date(2026, 10, 19)) is expected


class TestDashboardStats:
    """Tests for dashboard_stats."""

    def test_counts(self, contacts, tasks):
        """Totals, active tasks and this month's contacts."""
        companies = [Company(id="a", name="Acme")]
        now = datetime(2026, 10, 19, tzinfo=timezone.utc)

        stats = dashboard_stats(contacts, companies, tasks, now=now)

        assert stats.total_contacts == 3
        assert stats.total_companies == 1
        assert stats.active_tasks == 3
        assert stats.contacts_this_month == 2

    def test_recent_and_upcoming_lists(self, contacts, tasks):
        """Most recent contacts first; upcoming tasks are open and dated."""
        stats = dashboard_stats(contacts, [], tasks, limit=2)

        assert [c.id for c in stats.recent_contacts] == ["3", "1"]
        assert [t.id for t in stats.upcoming_tasks] == ["t3", "t1"]

    def test_empty(self):
        """No records gives zeroes and empty lists."""
        stats = dashboard_stats([], [], [])

        assert stats.total_contacts == 0
        assert stats.recent_contacts == []
        assert stats.upcoming_tasks == []
