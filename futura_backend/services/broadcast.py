"""Relay of ``{type, payload}`` events to a Redis pub/sub channel for live UI refresh."""
import json
import logging

import redis

logger = logging.getLogger(__name__)


class Broadcaster:
    def __init__(self, app=None):
        self.url = None
        self.channel = None
        self._client = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.url = app.config["REDIS_URL"]
        self.channel = app.config["BROADCAST_CHANNEL"]
        app.extensions["broadcaster"] = self

    @property
    def client(self):
        # connection is opened on first publish
        if self._client is None:
            self._client = redis.Redis.from_url(self.url)
        return self._client

    @client.setter
    def client(self, value):
        self._client = value

    def publish(self, event, payload, channel=None):
        """Publish one event; returns the number of subscribers that received it."""
        channel = channel or self.channel
        message = json.dumps({"type": "broadcast", "event": event, "payload": payload}, default=str)
        receivers = self.client.publish(channel, message)
        logger.info("Broadcast %s on %s reached %s subscriber(s)", event, channel, receivers)
        return receivers


broadcaster = Broadcaster()
