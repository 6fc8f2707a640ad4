import importlib.resources as importlib_resources
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, Any
from pathlib import Path
from collections.abc import Iterable

from . import resources as jirahook_resources
from .entities import DispatchAction, TransitionSpec


__all__ = ["load_config", "generate_config_template"]


logger = logging.getLogger(__name__)


@dataclass
class JiraConfig:
    server: str = None
    issue_prefix: str = None
    open_transition_id: int = None
    open_transition_fields: Dict[str, Any] = field(default_factory=dict)
    close_transition_id: int = None
    close_transition_fields: Dict[str, Any] = field(default_factory=dict)
    merge_transition_id: int = None
    merge_transition_fields: Dict[str, Any] = field(default_factory=dict)
    require_linking_keyword: bool = False
    create_tracking_comment: bool = False
    max_retries: int = 0
    timeout: float = 30

    def get_transition(self, dispatch_action):
        transition_id = getattr(self, f"{dispatch_action.key}_transition_id")
        if transition_id is None:
            return None

        fields = getattr(self, f"{dispatch_action.key}_transition_fields") or {}
        return TransitionSpec(transition_id=int(transition_id), fields=dict(fields))


@dataclass
class GithubConfig:
    base_url: str = "https://api.github.com"
    annotate_pull_requests: bool = True
    max_retries: int = 0
    timeout: float = 30


@dataclass
class JirahookConfig:
    jira: JiraConfig = field(default_factory=JiraConfig)
    github: GithubConfig = field(default_factory=GithubConfig)

    def get_transition(self, dispatch_action):
        return self.jira.get_transition(dispatch_action)


# Environment variables that seed non-secret settings before config files run.
_ENVIRONMENT_PARAMETERS = {
    "JIRA_URL": "server",
    "JIRA_ISSUE_PREFIX": "issue_prefix",
}

_ENVIRONMENT_TRANSITIONS = {
    DispatchAction.OPEN: "JIRA_TRANSITION_OPENED",
    DispatchAction.CLOSE: "JIRA_TRANSITION_CLOSED",
    DispatchAction.MERGE: "JIRA_TRANSITION_MERGED",
}


def load_config(paths=None, environ=None):
    config = JirahookConfig()

    if environ is None:
        environ = os.environ
    apply_environment(config, environ)

    if paths is None:
        paths = []
    elif not isinstance(paths, Iterable) or isinstance(paths, str):
        paths = [paths]

    for path in paths:
        p = Path(path)
        if not (p.exists() and p.is_file()):
            raise FileNotFoundError(f"Config file at {path} not found")
        with p.open() as file:
            exec(file.read(), {}, {"c": config})

    validate_config(config)

    return config


def apply_environment(config, environ):
    for variable, attribute in _ENVIRONMENT_PARAMETERS.items():
        if environ.get(variable):
            setattr(config.jira, attribute, environ[variable])

    for dispatch_action, variable in _ENVIRONMENT_TRANSITIONS.items():
        if environ.get(variable):
            try:
                transition_id = int(environ[variable])
            except ValueError:
                raise RuntimeError(f"{variable} must be an integer transition ID, got {environ[variable]!r}")
            setattr(config.jira, f"{dispatch_action.key}_transition_id", transition_id)

        extra = environ.get(f"{variable}_EXTRA")
        if extra:
            try:
                fields = json.loads(extra)
            except ValueError:
                raise RuntimeError(f"{variable}_EXTRA must contain a JSON object")
            if not isinstance(fields, dict):
                raise RuntimeError(f"{variable}_EXTRA must contain a JSON object")
            setattr(config.jira, f"{dispatch_action.key}_transition_fields", fields)


def generate_config_template():
    return importlib_resources.files(jirahook_resources).joinpath("config_template.py").read_text()


_REQUIRED_PARAMETERS = {
    ("jira.server", "JIRA server"),
    ("jira.issue_prefix", "JIRA issue key prefix"),
}


def validate_config(config):
    for param, description in _REQUIRED_PARAMETERS:
        value = config
        for part in param.split("."):
            value = getattr(value, part)
        if not value:
            raise RuntimeError(f"Missing {description}, please set c.{param} in your config file")

    for dispatch_action in DispatchAction:
        transition_id = getattr(config.jira, f"{dispatch_action.key}_transition_id")
        if transition_id is not None and not isinstance(transition_id, int):
            raise RuntimeError(f"c.jira.{dispatch_action.key}_transition_id must be an integer")

        fields = getattr(config.jira, f"{dispatch_action.key}_transition_fields")
        if fields is not None and not isinstance(fields, dict):
            raise RuntimeError(f"c.jira.{dispatch_action.key}_transition_fields must be a dict")

        if transition_id is None:
            logger.info("No JIRA transition configured for %s pull requests", dispatch_action)
