# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/services/notification_service.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Resource change notifications.

The notifier fans ``notifications/resources/list_changed`` and
``notifications/resources/updated`` out to every subscribed observer.
Delivery is best effort. Subscribers are sent to concurrently, each send
bounded by ``send_timeout``; a subscriber that fails or stalls is logged,
dropped and never retried, and the failure is not raised to the publisher.
"""

# Standard
import asyncio
import logging
import threading
from typing import Any, List, Optional, Protocol

# Third-Party
from pydantic import AnyUrl

# First-Party
from dataverse_mcp.models import ResourceListChangedNotification, ResourceNotification, ResourceUpdateNotification

logger = logging.getLogger(__name__)


class NotificationSubscriber(Protocol):
    """Anything able to receive resource notifications."""

    async def send(self, notification: ResourceNotification) -> None:
        """Deliver one notification.

        Args:
            notification: The notification to deliver.
        """


class SessionSubscriber:
    """Forwards notifications to a connected MCP client session.

    Two subscribers wrapping the same session compare equal, so a session
    subscribes at most once.
    """

    def __init__(self, session: Any) -> None:
        """Wrap an MCP ``ServerSession``.

        Args:
            session: The session notifications are sent to.
        """
        self.session = session

    async def send(self, notification: ResourceNotification) -> None:
        """Send ``notification`` over the session.

        Args:
            notification: The notification to deliver.
        """
        if isinstance(notification, ResourceUpdateNotification):
            await self.session.send_resource_updated(AnyUrl(notification.uri))
        else:
            await self.session.send_resource_list_changed()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, SessionSubscriber) and other.session is self.session

    def __hash__(self) -> int:
        return id(self.session)

    def __repr__(self) -> str:
        return f"SessionSubscriber(session={id(self.session):#x})"


class ResourceNotifier:
    """Subscriber list for resource change notifications."""

    def __init__(self, send_timeout: Optional[float] = 5.0) -> None:
        """Initialize an empty subscriber list.

        Args:
            send_timeout: Seconds one subscriber may take to accept a
                notification; None waits indefinitely.
        """
        self.send_timeout = send_timeout
        self._subscribers: List[NotificationSubscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, subscriber: NotificationSubscriber) -> bool:
        """Add a subscriber unless an equal one is already registered.

        Args:
            subscriber: The observer to add.

        Returns:
            bool: True when the subscriber was added.
        """
        with self._lock:
            if subscriber in self._subscribers:
                return False
            self._subscribers.append(subscriber)
        logger.debug(f"Subscribed {subscriber!r} to resource notifications")
        return True

    def unsubscribe(self, subscriber: NotificationSubscriber) -> bool:
        """Remove a subscriber.

        Args:
            subscriber: The observer to remove.

        Returns:
            bool: True when the subscriber was registered.
        """
        with self._lock:
            try:
                self._subscribers.remove(subscriber)
            except ValueError:
                return False
        logger.debug(f"Unsubscribed {subscriber!r} from resource notifications")
        return True

    @property
    def subscribers(self) -> List[NotificationSubscriber]:
        """Snapshot of current subscribers.

        Returns:
            List[NotificationSubscriber]: Registered observers.
        """
        with self._lock:
            return list(self._subscribers)

    async def notify(self, notification: ResourceNotification) -> int:
        """Deliver ``notification`` to every subscriber.

        Args:
            notification: The notification to deliver.

        Returns:
            int: Number of subscribers that received it.
        """
        results = await asyncio.gather(*(self._deliver(subscriber, notification) for subscriber in self.subscribers))
        return sum(results)

    async def _deliver(self, subscriber: NotificationSubscriber, notification: ResourceNotification) -> bool:
        """Send to one subscriber, dropping it on failure or timeout.

        Args:
            subscriber: Receiving observer.
            notification: The notification to deliver.

        Returns:
            bool: True when the subscriber accepted the notification.
        """
        try:
            await asyncio.wait_for(subscriber.send(notification), timeout=self.send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Dropping subscriber {subscriber!r}: {notification.method} not accepted within {self.send_timeout}s")
        except Exception as e:
            logger.warning(f"Dropping subscriber {subscriber!r} after failed {notification.method}: {e}")
        self.unsubscribe(subscriber)
        return False

    async def resource_list_changed(self) -> int:
        """Emit ``notifications/resources/list_changed``.

        Returns:
            int: Number of subscribers notified.
        """
        return await self.notify(ResourceListChangedNotification())

    async def resource_updated(self, uri: str) -> int:
        """Emit ``notifications/resources/updated`` for ``uri``.

        Args:
            uri: Canonical key of the changed resource.

        Returns:
            int: Number of subscribers notified.
        """
        return await self.notify(ResourceUpdateNotification(uri=uri))
