import subprocess
from unittest import mock

import pytest

from rainbow.errors import CommandError
from rainbow.git import Git


def _fake_git(current="main", branches=("main", "dev"), fail_on=None):
    state = {"current": current, "branches": list(branches)}
    calls = []

    def listing():
        return "".join(
            ("* " if name == state["current"] else "  ") + name + "\n"
            for name in state["branches"]
        )

    def run(args, **kwargs):
        calls.append((list(args), kwargs.get("cwd")))
        sub = list(args[1:])
        if fail_on is not None and sub[0] == fail_on:
            return subprocess.CompletedProcess(args, 128, stdout="fatal: boom")
        if sub == ["branch", "--show-current"]:
            return subprocess.CompletedProcess(args, 0, stdout=state["current"] + "\n")
        if sub == ["branch"]:
            return subprocess.CompletedProcess(args, 0, stdout=listing())
        if sub[0] == "checkout":
            if "-b" in sub:
                name = sub[-1]
                state["branches"].append(name)
            else:
                name = sub[1]
            state["current"] = name
        return subprocess.CompletedProcess(args, 0, stdout="")

    return run, calls


def test_current_branch_is_stripped():
    run, _ = _fake_git(current="feature")
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        assert Git("/repo", "x", "t").current_branch() == "feature"


def test_local_branches_parsed():
    run, _ = _fake_git()
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        assert Git("/repo", "x", "t").local_branches() == ["* main", "dev"]


def test_checkout_noop_when_already_on_branch():
    run, calls = _fake_git(current="main")
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        git = Git("/repo", "main", "t")
        git.checkout()
        checkout_calls = [c[0] for c in calls]
        assert git.current_branch() == "main"
    assert checkout_calls == [["git", "branch", "--show-current"]]


def test_checkout_existing_local_branch():
    run, calls = _fake_git(current="main")
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        git = Git("/repo", "dev", "t")
        git.checkout()
        assert git.current_branch() == "dev"
        assert git.local_branches() == ["main", "* dev"]
    assert ["git", "checkout", "dev"] in [c[0] for c in calls]


def test_checkout_creates_branch_from_origin_master():
    run, calls = _fake_git(current="main", branches=("main",))
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        git = Git("/repo", "sync", "t")
        git.checkout()
        assert git.current_branch() == "sync"
        assert git.local_branches() == ["main", "* sync"]
    assert ["git", "checkout", "remotes/origin/master", "-b", "sync"] in [
        c[0] for c in calls
    ]


def test_push_adds_commits_and_pushes_in_repo_dir():
    run, calls = _fake_git(fail_on="push")
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        with pytest.raises(CommandError) as info:
            Git("/repo", "main", "update images").push()
    assert info.value.output == "fatal: boom"
    assert [c[0] for c in calls] == [
        ["git", "add", "."],
        ["git", "commit", "-m", "update images"],
        ["git", "push", "origin", "HEAD", "--force"],
    ]
    assert {c[1] for c in calls} == {"/repo"}


def test_failure_stops_push_and_raises():
    run, calls = _fake_git(fail_on="commit")
    with mock.patch("rainbow.git.subprocess.run", side_effect=run):
        with pytest.raises(CommandError) as info:
            Git("/repo", "main", "t").push()
    assert info.value.output == "fatal: boom"
    assert all(c[0][1] != "push" for c in calls)