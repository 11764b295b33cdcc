"""Tests for improvement suggestions, project type and tech stack."""

from datetime import timedelta

from conftest import NOW, make_summary

from tailored_ai.services.suggestions import (
    MAX_SUGGESTIONS,
    SUGGEST_DESCRIPTION,
    SUGGEST_ISSUES,
    SUGGEST_README,
    SUGGEST_REFRESH,
    SUGGEST_TOPICS,
    SUGGEST_VISIBILITY,
    determine_project_type,
    extract_tech_stack,
    suggest,
)


class TestSuggest:
    def test_bare_repository_gets_five_in_fixed_order(self):
        summary = make_summary(
            description=None,
            topics=frozenset(),
            updated_at=NOW - timedelta(days=13 * 30),
            star_count=0,
            fork_count=0,
            has_issues_enabled=False,
        )
        assert suggest(summary, has_readme=False, now=NOW) == [
            SUGGEST_DESCRIPTION,
            SUGGEST_README,
            SUGGEST_TOPICS,
            SUGGEST_REFRESH,
            SUGGEST_VISIBILITY,
        ]

    def test_issues_suggestion_appears_when_room(self):
        summary = make_summary(star_count=2, has_issues_enabled=False)
        assert suggest(summary, has_readme=True, now=NOW) == [SUGGEST_ISSUES]

    def test_polished_repository_gets_none(self):
        summary = make_summary(star_count=2)
        assert suggest(summary, has_readme=True, now=NOW) == []

    def test_never_more_than_cap(self):
        summary = make_summary(
            description="", topics=frozenset(), updated_at=None, has_issues_enabled=False
        )
        assert len(suggest(summary, has_readme=False, now=NOW)) == MAX_SUGGESTIONS


class TestProjectType:
    def test_web_from_topics(self):
        assert determine_project_type(make_summary("site", topics=frozenset({"website"}))) == "Web Application"

    def test_api_from_name(self):
        assert determine_project_type(make_summary("payments-api", description=None, topics=frozenset())) == "API/Backend"

    def test_cli_from_topics(self):
        summary = make_summary("tool", description=None, topics=frozenset({"cli"}))
        assert determine_project_type(summary) == "CLI Tool"

    def test_data_science_requires_python(self):
        summary = make_summary(
            "model", description=None, topics=frozenset({"machine-learning"}), primary_language="Python"
        )
        assert determine_project_type(summary) == "Data Science/ML"
        assert determine_project_type(
            make_summary("model", description=None, topics=frozenset({"machine-learning"}), primary_language="R")
        ) == "General Project"


class TestTechStack:
    def test_primary_language_then_languages_then_topics(self):
        summary = make_summary(primary_language="Python", topics=frozenset({"fastapi", "docker"}))
        stack = extract_tech_stack(summary, {"Shell": 10, "Python": 900, "HTML": 50})
        assert stack == ["Python", "HTML", "Shell", "docker", "fastapi"]

    def test_is_capped_and_deduplicated(self):
        summary = make_summary(primary_language="Go", topics=frozenset(f"t{i}" for i in range(20)))
        stack = extract_tech_stack(summary, {"Go": 5})
        assert len(stack) == 10
        assert stack.count("Go") == 1
