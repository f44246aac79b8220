"""
Rules engine facade.

Every operation resolves the caller identity, checks the referenced channel
where there is one, namespaces resource names with the caller prefix and
forwards a single request to Kuiper:

  1. identify(token) -> Identity
  2. channel(topic, token) for operations that reference a channel
  3. prepend the user prefix to stream / rule names
  4. one Kuiper REST call
  5. translate the response into a result string or an error
"""

from __future__ import annotations

import logging
from typing import List

import requests
from requests.utils import quote

from .config import Settings
from .errors import (
    ChannelLookupError,
    KuiperServerError,
    MalformedEntityError,
    NotFoundError,
    TokenValidationError,
    UnauthorizedAccessError,
)
from .kuiper import KuiperClient
from .models import Identity, Info, Rule, Stream
from .naming import namespace_query, prepend, remove, remove_all, stream_sql

logger = logging.getLogger(__name__)

STREAMS_PATH = "streams"
RULES_PATH = "rules"


def _stream_path(name: str) -> str:
    return f"{STREAMS_PATH}/{quote(name, safe='')}"


def result(response: requests.Response, action: str, expected_status: int) -> str:
    """
    Translate a Kuiper write response into a human readable result.

    Statuses other than ``expected_status`` are reported in the returned
    string together with the Kuiper response body, not raised.
    """
    if response.status_code == expected_status:
        return f"{action} successful."

    try:
        reason = response.text
    except (requests.RequestException, UnicodeDecodeError) as exc:
        raise KuiperServerError(f"failed to read kuiper response: {exc}") from exc

    logger.warning("%s failed with Kuiper status %s", action, response.status_code)
    return f"{action} failed. Kuiper http status: {response.status_code}. {reason}"


class RulesEngineService:
    """
    Authorized, namespaced access to Kuiper streams and rules.

    ``identity_client`` must provide ``identify(token) -> Identity`` and
    ``channel_client`` must provide ``channel(channel_id, token)``.
    """

    def __init__(self, identity_client, channel_client, kuiper: KuiperClient, settings: Settings):
        self.identity_client = identity_client
        self.channel_client = channel_client
        self.kuiper = kuiper
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Authorization
    # ------------------------------------------------------------------ #

    def _identify(self, token: str) -> Identity:
        try:
            return self.identity_client.identify(token)
        except TokenValidationError as exc:
            logger.warning("Rejected token: %s", exc)
            raise UnauthorizedAccessError() from exc

    def _check_channel(self, channel_id: str, token: str) -> None:
        try:
            self.channel_client.channel(channel_id, token)
        except ChannelLookupError as exc:
            logger.warning("Channel check failed for %s: %s", channel_id, exc)
            raise UnauthorizedAccessError() from exc

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def info(self) -> Info:
        # Unauthenticated, unlike every other operation.
        response = self.kuiper.get()
        try:
            return Info.model_validate(response.json())
        except ValueError as exc:
            raise KuiperServerError(f"invalid kuiper info payload: {exc}") from exc

    def create_stream(self, token: str, name: str, topic: str, row: str) -> str:
        identity = self._identify(token)
        self._check_channel(topic, token)

        name = prepend(identity.id, name)
        body = {"sql": self._stream_sql(name, topic, row)}
        logger.info("Creating stream %s on topic %s", name, topic)
        response = self.kuiper.post(STREAMS_PATH, json=body)
        return result(response, "Create stream", 201)

    def update_stream(self, token: str, name: str, topic: str, row: str) -> str:
        identity = self._identify(token)
        self._check_channel(topic, token)

        name = prepend(identity.id, name)
        body = {"sql": self._stream_sql(name, topic, row)}
        logger.info("Updating stream %s on topic %s", name, topic)
        response = self.kuiper.put(_stream_path(name), json=body)
        return result(response, "Update stream", 200)

    def list_streams(self, token: str) -> List[str]:
        identity = self._identify(token)

        response = self.kuiper.get(STREAMS_PATH)
        try:
            streams = response.json()
        except ValueError as exc:
            raise MalformedEntityError(f"invalid stream list: {exc}") from exc
        if streams is None:
            # Kuiper answers null when no stream is declared
            streams = []
        if not isinstance(streams, list) or not all(isinstance(s, str) for s in streams):
            raise MalformedEntityError("stream list must be a list of names")

        return remove_all(identity.id, streams)

    def view_stream(self, token: str, name: str) -> Stream:
        identity = self._identify(token)

        name = prepend(identity.id, name)
        response = self.kuiper.get(_stream_path(name))
        if response.status_code == 404:
            raise NotFoundError()

        try:
            stream = Stream.model_validate(response.json())
        except ValueError as exc:
            raise MalformedEntityError(f"invalid stream payload: {exc}") from exc

        stream.name = remove(identity.id, stream.name)
        return stream

    def delete_stream(self, token: str, name: str) -> str:
        identity = self._identify(token)

        name = prepend(identity.id, name)
        logger.info("Deleting stream %s", name)
        response = self.kuiper.delete(_stream_path(name))
        return result(response, "Delete stream", 200)

    def create_rule(self, token: str, rule: Rule) -> str:
        identity = self._identify(token)
        if not rule.actions:
            raise MalformedEntityError("rule must have at least one action")
        # Only the first action's channel is checked.
        self._check_channel(rule.actions[0].mainflux.channel, token)

        namespaced = rule.model_copy(
            update={
                "id": prepend(identity.id, rule.id),
                "sql": namespace_query(identity.id, rule.sql),
            }
        )
        logger.info("Creating rule %s", namespaced.id)
        response = self.kuiper.post(RULES_PATH, json=namespaced.model_dump())
        return result(response, "Create rule", 201)

    def _stream_sql(self, name: str, topic: str, row: str) -> str:
        return stream_sql(
            name,
            topic,
            row,
            self.settings.stream_format,
            self.settings.stream_type,
        )
