"""Tests for command parsing (LLM path and keyword fallback)."""

import asyncio
import json

import pytest
from conftest import FakeLlm

from tailored_ai.domain.actions import (
    ActionType,
    AnalyzeComplexity,
    CreateFile,
    CreateRepo,
    CvRecommendations,
    DeleteRepo,
    GeneralResponse,
    SortRepos,
)
from tailored_ai.domain.entities import ConversationTurn, SortCriterion, SortDirection
from tailored_ai.domain.exceptions import LlmError
from tailored_ai.services.command_parser import (
    CREATE_REPO_FALLBACK_CONFIDENCE,
    CV_RECOMMENDATIONS_FALLBACK_CONFIDENCE,
    GENERAL_RESPONSE_FALLBACK_CONFIDENCE,
    HISTORY_LIMIT,
    SORT_COMPLEXITY_FALLBACK_CONFIDENCE,
    SYSTEM_PROMPT,
    CommandParser,
    action_from_reply,
    deletion_confirmation_target,
    fallback_parse,
)


def _reply(type_, parameters=None, confidence=0.95, intent="test"):
    return json.dumps(
        {"type": type_, "intent": intent, "parameters": parameters or {}, "confidence": confidence}
    )


class TestFallbackParse:
    def test_create_repo_with_name(self):
        action = fallback_parse("Create a new repo named Foo")

        assert isinstance(action, CreateRepo)
        assert action.name == "Foo"
        assert action.confidence == CREATE_REPO_FALLBACK_CONFIDENCE

    def test_create_repo_quoted_name(self):
        assert fallback_parse('please create a repository called "my project"').name == "my project"

    def test_create_repo_default_name(self):
        assert fallback_parse("create a repo for me").name == "new-repository"

    def test_sort_for_cv(self):
        action = fallback_parse("Sort my repos from simple to complex for my CV")
        assert isinstance(action, CvRecommendations)
        assert action.confidence == CV_RECOMMENDATIONS_FALLBACK_CONFIDENCE

    def test_sort_by_complexity(self):
        action = fallback_parse("sort repos by complexity")
        assert isinstance(action, SortRepos)
        assert action.criterion is SortCriterion.COMPLEXITY
        assert action.direction is SortDirection.ASC
        assert action.confidence == SORT_COMPLEXITY_FALLBACK_CONFIDENCE

    def test_anything_else_is_general(self):
        action = fallback_parse("what's the weather like?")
        assert isinstance(action, GeneralResponse)
        assert action.confidence == GENERAL_RESPONSE_FALLBACK_CONFIDENCE


class TestActionFromReply:
    def test_create_file(self):
        action = action_from_reply(
            _reply("create_file", {"repo": "hello", "filename": "README.md", "message": "docs"})
        )
        assert action == CreateFile(
            repo="hello", path="README.md", commit_message="docs", confidence=0.95, intent="test"
        )

    def test_strips_markdown_fences(self):
        raw = "```json\n" + _reply("delete_repo", {"name": "old"}) + "\n```"
        action = action_from_reply(raw)
        assert isinstance(action, DeleteRepo)
        assert action.name == "old"
        assert action.confirmed is False

    def test_aliased_parameters(self):
        analyze = action_from_reply(_reply("analyze_complexity", {"all": True}))
        cv = action_from_reply(_reply("cv_recommendations", {"targetJob": "Backend engineer"}))
        assert isinstance(analyze, AnalyzeComplexity) and analyze.analyze_all
        assert isinstance(cv, CvRecommendations) and cv.target_job == "Backend engineer"

    def test_sort_parameters(self):
        action = action_from_reply(_reply("sort_repos", {"criteria": "date", "order": "desc"}))
        assert action.criterion is SortCriterion.DATE
        assert action.direction is SortDirection.DESC

    @pytest.mark.parametrize(
        "raw",
        [
            "not json",
            "[1, 2, 3]",
            _reply("launch_rockets"),
            _reply("create_repo", confidence=1.5),
            _reply("sort_repos", {"criteria": "popularity"}),
        ],
    )
    def test_invalid_replies_raise_value_error(self, raw):
        with pytest.raises(ValueError):
            action_from_reply(raw)


class TestCommandParser:
    async def test_uses_llm_reply(self):
        llm = FakeLlm(_reply("create_repo", {"name": "Hello world", "private": True}))
        action = await CommandParser(llm).parse("make me a private repo")

        assert isinstance(action, CreateRepo)
        assert action.name == "Hello world"
        assert action.is_private is True
        assert llm.calls[0]["system_prompt"] == SYSTEM_PROMPT

    async def test_forwards_only_recent_history(self):
        llm = FakeLlm(_reply("general_response"))
        history = [ConversationTurn(role="user", content=str(i)) for i in range(12)]
        await CommandParser(llm).parse("hi", history)

        sent = llm.calls[0]["history"]
        assert len(sent) == HISTORY_LIMIT
        assert sent[-1].content == "11"

    async def test_without_llm_uses_fallback(self):
        action = await CommandParser(None).parse("Create a new repo named Foo")
        assert action.type is ActionType.CREATE_REPO
        assert action.confidence == CREATE_REPO_FALLBACK_CONFIDENCE

    async def test_llm_error_uses_fallback(self):
        action = await CommandParser(FakeLlm(LlmError("boom"))).parse("Create a new repo named Foo")
        assert isinstance(action, CreateRepo)
        assert action.name == "Foo"

    async def test_malformed_reply_uses_fallback(self):
        action = await CommandParser(FakeLlm("Sure! I'll sort them.")).parse("sort by complexity")
        assert isinstance(action, SortRepos)

    async def test_cancelled_generation_uses_fallback(self):
        event = asyncio.Event()
        event.set()
        action = await CommandParser(FakeLlm(_reply("delete_repo", {"name": "x"}))).parse(
            "hello", cancel_event=event
        )
        assert isinstance(action, GeneralResponse)


class TestDeletionConfirmationTarget:
    @pytest.mark.parametrize(
        "message, target",
        [
            ("Yes, delete hello-world permanently", "hello-world"),
            ('"yes delete Foo permanently."', "Foo"),
            ("delete hello-world", None),
            ("Yes, delete it", None),
        ],
    )
    def test_phrases(self, message, target):
        assert deletion_confirmation_target(message) == target
