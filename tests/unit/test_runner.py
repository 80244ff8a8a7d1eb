"""Unit tests for the notification runner."""

from __future__ import annotations

import dataclasses
import typing as typ

import pytest

from ci_notify import runner as runner_module
from ci_notify.config import NotifierConfig
from ci_notify.errors import ChatAPIError
from ci_notify.identity import default_strategies
from ci_notify.models import EmailSource
from ci_notify.outputs import ActionOutputs
from ci_notify.runner import (
    CHANNEL_ID,
    CHANNEL_MESSAGE_ID,
    DIRECT_MESSAGE_ID,
    DIRECT_USER_ID,
    NotificationRunner,
    summarize,
)
from tests.helpers.fakes import (
    FakeChatClient,
    FakeGitHubClient,
    FakeLogger,
    make_commit,
    make_pull_request,
    make_status,
)

if typ.TYPE_CHECKING:
    from ci_notify.models import RunReport

_SSO_EMAIL = "octo@acme.example"


def _config(
    conclusion: str = "failure",
    *,
    channel: str | None = "ops-alerts",
    send_to_user: bool = True,
) -> NotifierConfig:
    return NotifierConfig(
        slack_token="xoxb-test",
        github_token="ghp-test",
        commit=make_commit(),
        status=make_status(conclusion),
        channel=channel,
        send_to_user=send_to_user,
        github_org="acme",
    )


@dataclasses.dataclass
class _Harness:
    chat: FakeChatClient
    github: FakeGitHubClient
    outputs: ActionOutputs

    async def run(self, config: NotifierConfig) -> RunReport:
        runner = NotificationRunner(
            config,
            chat=self.chat,
            strategies=default_strategies(self.github),
            outputs=self.outputs,
        )
        return await runner.run()


@pytest.fixture
def harness() -> _Harness:
    """Runner collaborators with a mapped author and a resolvable channel."""
    return _Harness(
        chat=FakeChatClient(
            users={_SSO_EMAIL: "U123"}, channel_ids={"ops-alerts": "C042"}
        ),
        github=FakeGitHubClient(sso={"octocat": _SSO_EMAIL}),
        outputs=ActionOutputs(None),
    )


@pytest.mark.asyncio
async def test_failure_sends_direct_message_and_broadcast(harness: _Harness) -> None:
    """A failed check notifies the author and the channel."""
    report = await harness.run(_config("failure"))

    assert report.email_source is EmailSource.SSO
    assert report.commit.author_email == _SSO_EMAIL
    recipients = [target for target, _ in harness.chat.posted]
    assert recipients == ["U123", "ops-alerts"]
    dm_text = harness.chat.posted[0][1]
    channel_text = harness.chat.posted[1][1]
    assert dm_text.startswith(":red_circle: The CI job")
    assert channel_text.startswith(":warning: The commit")
    assert "<@U123> (<https://github.com/octocat|octocat>)" in channel_text


@pytest.mark.asyncio
async def test_both_paths_write_distinct_outputs(harness: _Harness) -> None:
    """Direct and channel results are reported under separate keys."""
    await harness.run(_config("failure"))

    assert harness.outputs.written == {
        DIRECT_MESSAGE_ID: "1718000000.000001",
        DIRECT_USER_ID: "U123",
        CHANNEL_MESSAGE_ID: "1718000000.000002",
        CHANNEL_ID: "C042",
    }


@pytest.mark.asyncio
async def test_success_is_never_broadcast(harness: _Harness) -> None:
    """Successful checks only reach the author."""
    report = await harness.run(_config("success"))

    assert [target for target, _ in harness.chat.posted] == ["U123"]
    assert report.channel is None
    assert CHANNEL_ID not in harness.outputs.written


@pytest.mark.asyncio
async def test_unknown_conclusion_sends_direct_message_only(
    harness: _Harness,
) -> None:
    """Unknown conclusions are summarised to the author but not broadcast."""
    report = await harness.run(_config("cancelled"))

    assert report.direct is not None
    assert report.channel is None
    assert harness.chat.posted[0][1].startswith(":question: ")


@pytest.mark.asyncio
async def test_direct_failure_does_not_block_channel(
    harness: _Harness, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A failed direct message is logged and the broadcast still happens."""
    logger = FakeLogger()
    monkeypatch.setattr(runner_module, "logger", logger)
    harness.chat.post_errors["U123"] = ChatAPIError.api_error(
        "chat.postMessage", "cannot_dm_bot"
    )

    report = await harness.run(_config("failure"))

    assert report.direct is None
    assert report.channel is not None
    assert DIRECT_MESSAGE_ID not in harness.outputs.written
    assert harness.outputs.written[CHANNEL_ID] == "C042"
    assert any(
        m.startswith("Failed to send message to user")
        for m in logger.messages("ERROR")
    )


@pytest.mark.asyncio
async def test_channel_failure_is_not_fatal(harness: _Harness) -> None:
    """A rejected broadcast leaves the direct message result intact."""
    harness.chat.post_errors["ops-alerts"] = ChatAPIError.api_error(
        "chat.postMessage", "channel_not_found"
    )

    report = await harness.run(_config("failure"))

    assert report.direct is not None
    assert report.channel is None


@pytest.mark.asyncio
async def test_nothing_configured_sends_nothing(harness: _Harness) -> None:
    """Without a channel or the user flag no message is sent."""
    report = await harness.run(_config("failure", channel=None, send_to_user=False))

    assert harness.chat.posted == []
    assert harness.outputs.written == {}
    assert report.direct is None
    assert report.channel is None


@pytest.mark.asyncio
async def test_unresolved_author_keeps_commit_email(harness: _Harness) -> None:
    """Without an SSO mapping the commit email is used for delivery."""
    harness.github.sso.clear()
    harness.chat.users["octocat@users.noreply.github.com"] = "U777"

    report = await harness.run(_config("success", channel=None))

    assert report.email_source is EmailSource.COMMIT
    assert harness.chat.posted[0][0] == "U777"


@pytest.mark.asyncio
async def test_broadcast_without_slack_user_links_github_profile(
    harness: _Harness,
) -> None:
    """Authors missing from Slack are credited by GitHub profile link."""
    harness.chat.users.clear()

    await harness.run(_config("failure", send_to_user=False))

    channel_text = harness.chat.posted[0][1]
    assert "by <https://github.com/octocat|octocat> has failed" in channel_text


@pytest.mark.asyncio
async def test_broadcast_without_username_names_author_by_email(
    harness: _Harness,
) -> None:
    """Without a login or Slack user the notice names the commit email."""
    config = dataclasses.replace(
        _config("failure", send_to_user=False), commit=make_commit(username="")
    )

    await harness.run(config)

    channel_text = harness.chat.posted[0][1]
    assert "<https://github.com/|>" not in channel_text
    assert "by octocat@users.noreply.github.com has failed" in channel_text
    assert harness.github.sso_calls == [], "Expected no identity lookups."


@pytest.mark.asyncio
async def test_broadcast_without_username_mentions_slack_user(
    harness: _Harness,
) -> None:
    """Without a login a known Slack user is mentioned without a profile link."""
    harness.chat.users["octocat@users.noreply.github.com"] = "U555"
    config = dataclasses.replace(
        _config("failure", send_to_user=False), commit=make_commit(username="")
    )

    await harness.run(config)

    channel_text = harness.chat.posted[0][1]
    assert "by <@U555> has failed" in channel_text


@pytest.mark.asyncio
async def test_broadcast_after_pull_request_fallback_links_pr_author(
    harness: _Harness,
) -> None:
    """The profile link names the login whose SSO mapping was used."""
    harness.github.sso = {"web-flow": None, "hubot": "hubot@acme.example"}
    harness.github.pulls = [make_pull_request(author_login="hubot")]
    harness.chat.users["hubot@acme.example"] = "U777"
    config = dataclasses.replace(
        _config("failure", send_to_user=False),
        commit=make_commit(username="web-flow"),
    )

    report = await harness.run(config)

    assert report.email_source is EmailSource.PULL_REQUEST_SSO
    channel_text = harness.chat.posted[0][1]
    assert "<@U777> (<https://github.com/hubot|hubot>)" in channel_text
    assert "web-flow" not in channel_text


@pytest.mark.asyncio
async def test_summarize(harness: _Harness) -> None:
    """summarize renders a report as plain data."""
    report = await harness.run(_config("failure"))

    summary = summarize(report)

    assert summary["email_source"] == "sso"
    assert summary["channel"] == {
        "target_id": "C042",
        "timestamp": "1718000000.000002",
    }
