from __future__ import annotations

import asyncio
import logging

from castr_fakes import two_streams
from services.reference_resolver import (
    ReferenceResolver,
    ResolvedPlatform,
    split_platform_reference,
)
from services.stream_directory import StreamDirectory


def _resolver(docs=None) -> ReferenceResolver:
    directory = StreamDirectory()
    directory.rebuild(docs if docs is not None else two_streams())
    return ReferenceResolver(directory)


def _multi_platform_docs():
    docs = two_streams()
    docs[1]["platforms"] = [
        {"_id": "p1", "name": "yt", "enabled": True},
        {"_id": "p2", "name": "twitch", "enabled": False},
        {"_id": "p3", "name": "yt", "enabled": False},
    ]
    return docs


def test_stream_id_is_kept() -> None:
    target = asyncio.run(_resolver().resolve_stream("s1"))
    assert target.stream_id == "s1"
    assert target.resolved


def test_stream_name_is_translated_to_id() -> None:
    target = asyncio.run(_resolver().resolve_stream("B"))
    assert target.stream_id == "s2"
    assert target.resolved


def test_id_match_wins_over_name_match() -> None:
    docs = two_streams()
    docs[1]["name"] = "s1"  # stream s2 is *named* "s1"
    target = asyncio.run(_resolver(docs).resolve_stream("s1"))

    assert target.stream_id == "s1"


def test_unknown_stream_is_passed_through_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        target = asyncio.run(_resolver().resolve_stream("nope"))

    assert target.stream_id == "nope"
    assert not target.resolved
    assert any("not found, passing as-is" in r.message for r in caplog.records)


def test_stream_token_is_expanded_first() -> None:
    async def expand(text: str) -> str:
        return text.replace("$(castr:main)", "B")

    target = asyncio.run(_resolver().resolve_stream("$(castr:main)", expand))
    assert target.stream_id == "s2"


def test_all_wildcard_returns_every_platform_in_order() -> None:
    target = asyncio.run(_resolver(_multi_platform_docs()).resolve_platform("B :: *ALL*"))

    assert target.stream_id == "s2"
    assert target.platforms == (
        ResolvedPlatform("p1", True),
        ResolvedPlatform("p2", False),
        ResolvedPlatform("p3", False),
    )


def test_duplicate_platform_names_are_all_returned() -> None:
    target = asyncio.run(_resolver(_multi_platform_docs()).resolve_platform("B :: yt"))

    assert [p.id for p in target.platforms] == ["p1", "p3"]


def test_unmatched_platform_name_resolves_to_no_platforms() -> None:
    target = asyncio.run(_resolver().resolve_platform("B :: facebook"))

    assert target.resolved
    assert target.stream_id == "s2"
    assert target.platforms == ()


def test_platform_stream_part_is_looked_up_by_name_only(caplog) -> None:
    with caplog.at_level(logging.ERROR):
        target = asyncio.run(_resolver().resolve_platform("s2 :: yt"))

    assert not target.resolved
    assert target.stream_id is None
    assert target.platforms == ()
    assert caplog.records


def test_resolve_options_with_stream_and_platform() -> None:
    resolver = _resolver()
    target = asyncio.run(resolver.resolve({"stream": "A", "platform": "B :: yt"}))

    assert target.stream_id == "s2"
    assert target.platforms == (ResolvedPlatform("p1", True),)
    assert target.resolved


def test_resolve_options_without_tokens_is_trivially_resolved() -> None:
    target = asyncio.run(_resolver().resolve({}))
    assert target.resolved
    assert target.stream_id is None


def test_split_platform_reference() -> None:
    assert split_platform_reference("Main :: yt") == ("Main", "yt")
    assert split_platform_reference("Main :: *ALL*") == ("Main", "*ALL*")
    assert split_platform_reference("Main") == ("Main", None)
    assert split_platform_reference("Main::yt") == ("Main::yt", None)
