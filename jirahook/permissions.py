from github import Auth, Github
from github.GithubException import BadCredentialsException, GithubException
from jira import JIRA
from jira.exceptions import JIRAError
import requests

from .entities import DispatchAction
from . import jira, github, webhook


__all__ = ["check_permissions"]


def check_permissions(config):
    errors = []

    errors.extend(_check_secret())
    errors.extend(_check_jira_permissions(config))
    errors.extend(_check_github_permissions(config))

    return errors


def _check_secret():
    if not webhook.get_secret():
        return ["Missing webhook secret.  Set the SECRET environment variable."]
    else:
        return []


def _check_jira_permissions(config):
    errors = []

    auth_kwargs = jira.get_auth_kwargs()
    if auth_kwargs is None:
        errors.append("Missing JIRA credentials.  Set JIRA_TOKEN, or JIRA_USERNAME and JIRA_PASSWORD.")
        return errors

    try:
        client = JIRA(config.jira.server, max_retries=0, timeout=config.jira.timeout, **auth_kwargs)
    except requests.exceptions.ConnectionError:
        errors.append(f"Unable to communicate with JIRA server: {config.jira.server}")
        return errors
    except JIRAError:
        errors.append("JIRA rejected credentials.  Check JIRA_TOKEN, or JIRA_USERNAME and JIRA_PASSWORD.")
        return errors

    try:
        perms_response = client.my_permissions(projectKey=config.jira.issue_prefix)
    except JIRAError:
        errors.append(f"JIRA project {config.jira.issue_prefix} does not exist.")
        return errors

    perms = {k for k, v in perms_response["permissions"].items() if v["havePermission"]}

    if "BROWSE_PROJECTS" not in perms:
        errors.append("JIRA user has not been granted the BROWSE_PROJECTS permission.")

    transitions = [t for t in (config.get_transition(a) for a in DispatchAction) if t is not None]

    if transitions and "TRANSITION_ISSUES" not in perms:
        errors.append("JIRA transitions are configured, but JIRA user has not been granted the TRANSITION_ISSUES permission.")

    if any("resolution" in t.fields for t in transitions) and "RESOLVE_ISSUES" not in perms:
        errors.append(
            "A JIRA transition sets the resolution field, but JIRA user has not been granted the RESOLVE_ISSUES permission."
        )

    if config.jira.create_tracking_comment and "ADD_COMMENTS" not in perms:
        errors.append(
            "c.jira.create_tracking_comment is enabled, but JIRA user has not been granted the ADD_COMMENTS permission."
        )

    return errors


def _check_github_permissions(config):
    errors = []

    token = github.get_token()
    if not token:
        errors.append("Missing GitHub access token.  Set the GITHUB_API_TOKEN environment variable.")
        return errors

    client = Github(auth=Auth.Token(token), base_url=config.github.base_url, timeout=config.github.timeout)

    try:
        client.get_user().login
    except BadCredentialsException:
        errors.append("GitHub rejected credentials.  Check GITHUB_API_TOKEN and try again.")
    except (GithubException, requests.exceptions.RequestException):
        errors.append(f"Unable to communicate with GitHub API: {config.github.base_url}")

    return errors
