"""Inbound Slack event model with extracted fields."""

from pydantic import BaseModel, ConfigDict


class InboundEvent(BaseModel):
    """A Slack message or app_mention event reduced to the fields the bot uses."""

    model_config = ConfigDict(frozen=True)

    sender_id: str
    raw_text: str = ""
    channel_id: str
    event_ts: str  # Slack message ts, e.g., "1234567890.123456"
    thread_ts: str | None = None  # Root ts when the message is a thread reply

    @property
    def reply_target(self) -> str:
        """Timestamp every reply in this conversation is threaded under."""
        return self.thread_ts or self.event_ts

    @classmethod
    def from_payload(cls, event: dict) -> "InboundEvent":
        """Build from a raw Slack ``event`` dict."""
        return cls(
            sender_id=event.get("user", ""),
            raw_text=event.get("text") or "",
            channel_id=event["channel"],
            event_ts=event["ts"],
            thread_ts=event.get("thread_ts"),
        )
