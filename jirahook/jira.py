import logging
import os

from jira import JIRA
from jira.exceptions import JIRAError
import requests

from .entities import Action, Result


__all__ = ["Client", "Formatter", "get_username", "get_password", "get_token"]


logger = logging.getLogger(__name__)


def get_username():
    return os.environ.get("JIRA_USERNAME")


def get_password():
    return os.environ.get("JIRA_PASSWORD")


def get_token():
    return os.environ.get("JIRA_TOKEN")


def get_auth_kwargs():
    token = get_token()
    if token:
        return {"token_auth": token}

    username = get_username()
    password = get_password()
    if username and password:
        return {"basic_auth": (username, password)}

    return None


class Client:
    @classmethod
    def from_config(cls, config):
        auth_kwargs = get_auth_kwargs()
        if auth_kwargs is None:
            raise RuntimeError(
                "Missing JIRA credentials.  Set JIRA_TOKEN, or JIRA_USERNAME and JIRA_PASSWORD, in the environment."
            )

        jira = JIRA(config.jira.server, max_retries=config.jira.max_retries, timeout=config.jira.timeout, **auth_kwargs)

        return cls(config, jira)

    def __init__(self, config, jira):
        self._config = config
        self._jira = jira

    def transition_issue(self, issue_key, transition):
        try:
            self._jira.transition_issue(issue_key, transition.transition_id, fields=transition.fields or None)
        except (JIRAError, requests.exceptions.RequestException) as e:
            return Result.failure(e)

        logger.info("Performed %s on issue %s", transition, issue_key)

        return Result.success()

    def add_comment(self, issue_key, body):
        try:
            self._jira.add_comment(issue_key, body)
        except (JIRAError, requests.exceptions.RequestException) as e:
            return Result.failure(e)

        logger.info("Created comment on issue %s", issue_key)

        return Result.success()


class Formatter:
    def format_link(self, url, link_text=None):
        if link_text:
            return f"[{link_text}|{url}]"
        else:
            return f"[{url}]"

    def format_tracking_comment(self, event):
        if event.action == Action.REOPENED:
            verb = "reopened"
        else:
            verb = "opened"

        link_text = f"{event.repository.full_name}#{event.pull_request.number}"
        return f"Pull request {verb}: {self.format_link(event.pull_request.html_url, link_text)}"
