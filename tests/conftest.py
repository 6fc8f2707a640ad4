import json

import pytest

from jirahook.config import JiraConfig, GithubConfig, JirahookConfig
from jirahook.signature import make_signature
from jirahook.utils import IssueKeyExtractor
from jirahook.webhook import WebhookProcessor
from jirahook import github
import jirahook.jira
import jirahook.github
import jirahook.permissions

from . import constants
from . import mocks


_CLEARED_ENVIRONMENT = [
    "JIRA_TOKEN",
    "JIRA_URL",
    "JIRA_ISSUE_PREFIX",
    "JIRA_TRANSITION_OPENED",
    "JIRA_TRANSITION_OPENED_EXTRA",
    "JIRA_TRANSITION_CLOSED",
    "JIRA_TRANSITION_CLOSED_EXTRA",
    "JIRA_TRANSITION_MERGED",
    "JIRA_TRANSITION_MERGED_EXTRA",
]


@pytest.fixture(autouse=True)
def setup_environment(monkeypatch):
    for key in _CLEARED_ENVIRONMENT:
        monkeypatch.delenv(key, raising=False)

    monkeypatch.setenv("JIRA_USERNAME", constants.TEST_JIRA_USERNAME)
    monkeypatch.setenv("JIRA_PASSWORD", constants.TEST_JIRA_PASSWORD)
    monkeypatch.setenv("GITHUB_API_TOKEN", constants.TEST_GITHUB_TOKEN)
    monkeypatch.setenv("SECRET", constants.TEST_SECRET)


@pytest.fixture(autouse=True)
def mock_raw_clients(monkeypatch):
    monkeypatch.setattr(jirahook.jira, "JIRA", mocks.MockJIRA)
    monkeypatch.setattr(jirahook.permissions, "JIRA", mocks.MockJIRA)
    monkeypatch.setattr(jirahook.github, "Github", mocks.MockGithub)
    monkeypatch.setattr(jirahook.permissions, "Github", mocks.MockGithub)


@pytest.fixture(autouse=True)
def reset_mocks():
    mocks.reset()


@pytest.fixture
def jira_config():
    return JiraConfig(
        server=constants.TEST_JIRA_SERVER,
        issue_prefix=constants.TEST_JIRA_ISSUE_PREFIX,
        open_transition_id=constants.TEST_OPEN_TRANSITION_ID,
        close_transition_id=constants.TEST_CLOSE_TRANSITION_ID,
        merge_transition_id=constants.TEST_MERGE_TRANSITION_ID,
        merge_transition_fields=constants.TEST_MERGE_TRANSITION_FIELDS,
    )


@pytest.fixture
def github_config():
    return GithubConfig()


@pytest.fixture()
def config(jira_config, github_config):
    return JirahookConfig(jira=jira_config, github=github_config)


@pytest.fixture
def extractor(config):
    return IssueKeyExtractor.from_config(config)


@pytest.fixture
def jira_client():
    return mocks.MockJiraClient()


@pytest.fixture
def github_client():
    return mocks.MockGithubClient()


@pytest.fixture
def processor(config, jira_client, github_client):
    return WebhookProcessor(
        config=config, secret=constants.TEST_SECRET, jira_client=jira_client, github_client=github_client
    )


@pytest.fixture
def create_payload():
    next_number = 1

    def _create_payload(action="opened", body="", title="Test pull request", state=None, merged=False, **kwargs):
        nonlocal next_number

        number = kwargs.pop("number", next_number)
        next_number += 1

        if state is None:
            state = "closed" if action == "closed" else "open"

        payload = {
            "action": action,
            "number": number,
            "pull_request": {
                "number": number,
                "title": title,
                "body": body,
                "state": state,
                "merged": merged,
                "html_url": f"https://github.com/{constants.TEST_GITHUB_REPOSITORY}/pull/{number}",
            },
            "repository": {
                "name": constants.TEST_GITHUB_REPOSITORY_NAME,
                "full_name": constants.TEST_GITHUB_REPOSITORY,
                "owner": {"login": constants.TEST_GITHUB_OWNER_LOGIN},
            },
        }

        payload.update(kwargs)

        return payload

    return _create_payload


@pytest.fixture
def create_event(create_payload):
    def _create_event(**kwargs):
        return github.parse_event(create_payload(**kwargs))

    return _create_event


@pytest.fixture
def create_delivery():
    def _create_delivery(payload, event="pull_request", secret=constants.TEST_SECRET, algorithm="sha1"):
        body = json.dumps(payload).encode("utf-8")
        headers = {
            "X-Github-Event": event,
            "X-Github-Delivery": "72d3162e-cc78-11e3-81ab-4c9367dc0958",
            "X-Hub-Signature": make_signature(body, secret, algorithm),
            "Content-Type": "application/json",
        }

        return body, headers

    return _create_delivery
