"""
System notification surface.

Every milestone notification goes out on one high-importance channel and
reuses one notification id, so announcing the same (or a newer) threshold
replaces the toast that is already up instead of stacking a second one.
Clicking it deep-links into the dashboard with the threshold attached.

The presenter does the drawing (toast.ToastPresenter on the desktop); this
module owns the channel, identity and payload.
"""

from dataclasses import dataclass, field

from .constants import (
    NOTIFICATION_ID, CHANNEL_ID, CHANNEL_NAME, CHANNEL_DESCRIPTION, VIBRATION_PATTERN,
)
from .config import log
from . import sound


@dataclass(frozen=True)
class NotificationChannel:
    channel_id: str = CHANNEL_ID
    name: str = CHANNEL_NAME
    description: str = CHANNEL_DESCRIPTION
    importance: str = "high"
    bypass_dnd: bool = True
    default_sound: bool = True
    vibration_pattern: tuple = VIBRATION_PATTERN


@dataclass(frozen=True)
class Notification:
    notification_id: int
    channel: NotificationChannel
    title: str
    text: str
    deep_link: dict = field(default_factory=dict)
    auto_cancel: bool = True


MILESTONE_CHANNEL = NotificationChannel()


def build_milestone_notification(threshold, metric="registrations", channel=MILESTONE_CHANNEL):
    if metric == "money":
        text = f"We've collected ₹{threshold:,}!"
    else:
        text = f"We've reached {threshold:,} registrations!"
    return Notification(
        notification_id=NOTIFICATION_ID,
        channel=channel,
        title="\U0001F389 MILESTONE ACHIEVED! \U0001F389",
        text=text,
        deep_link={"show_celebration": True, "milestone": threshold},
    )


class SystemNotifier:
    """
    presenter.show(notification, on_click)  — draws or replaces by notification_id
    presenter.cancel(notification_id)
    on_open(deep_link)                       — opens the dashboard
    """

    def __init__(self, presenter, on_open, metric="registrations",
                 channel=MILESTONE_CHANNEL, alert=sound.play_default_alert):
        self._presenter = presenter
        self._on_open = on_open
        self._metric = metric
        self._channel = channel
        self._alert = alert
        self._posted = {}

    @property
    def posted(self):
        """Notifications currently shown, keyed by id."""
        return dict(self._posted)

    def announce(self, threshold):
        self._post(build_milestone_notification(threshold, self._metric, self._channel),
                   with_sound=self._channel.default_sound)

    def announce_text(self, threshold):
        self._post(build_milestone_notification(threshold, self._metric, self._channel),
                   with_sound=False)

    def cancel(self, notification_id=NOTIFICATION_ID):
        if self._posted.pop(notification_id, None) is not None:
            self._presenter.cancel(notification_id)

    def _post(self, notification, with_sound):
        replacing = notification.notification_id in self._posted
        self._posted[notification.notification_id] = notification
        self._presenter.show(notification, lambda: self._clicked(notification))
        log.info("Notification %s #%d: %s",
                 "replaced" if replacing else "posted",
                 notification.notification_id, notification.text)
        if with_sound and self._alert is not None:
            self._alert()

    def _clicked(self, notification):
        if notification.auto_cancel:
            self.cancel(notification.notification_id)
        log.info("Notification clicked — opening dashboard (%s)", notification.deep_link)
        self._on_open(dict(notification.deep_link))
