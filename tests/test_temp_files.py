"""Staged audio files never outlive their scope."""

from __future__ import annotations

import re

import pytest


@pytest.mark.asyncio
async def test_stage_removes_file_on_normal_exit(temp_files):
    async with temp_files.stage(b"abc", ".webm") as staged:
        assert staged.path.read_bytes() == b"abc"
        assert re.fullmatch(r"audio_\d+_[A-Za-z0-9_-]+\.webm", staged.path.name)

    assert not staged.path.exists()
    assert staged.released


@pytest.mark.asyncio
async def test_stage_removes_file_when_body_raises(temp_files):
    with pytest.raises(ValueError):
        async with temp_files.stage(b"abc") as staged:
            raise ValueError("provider failed")

    assert not staged.path.exists()


@pytest.mark.asyncio
async def test_release_is_idempotent_and_tolerates_missing_file(temp_files):
    staged = await temp_files.create(b"abc", ".mp3")
    staged.path.unlink()

    await temp_files.release(staged)
    await temp_files.release(staged)

    assert staged.released


@pytest.mark.asyncio
async def test_concurrent_stages_get_distinct_names(temp_files):
    first = await temp_files.create(b"a")
    second = await temp_files.create(b"b")
    try:
        assert first.path != second.path
    finally:
        await temp_files.release(first)
        await temp_files.release(second)

    assert list(temp_files.base_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_stage_removes_file_on_early_return(temp_files):
    seen = []

    async def first_byte():
        async with temp_files.stage(b"xyz", ".wav") as staged:
            seen.append(staged.path)
            return staged.path.read_bytes()[:1]

    assert await first_byte() == b"x"
    assert not seen[0].exists()
    assert list(temp_files.base_dir.iterdir()) == []
