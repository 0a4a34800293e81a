from __future__ import annotations

from typing import NewType

RoomId = NewType("RoomId", str)
ParticipantId = NewType("ParticipantId", str)
MessageId = NewType("MessageId", str)

# Reserved author of synthetic verdict messages.
AI_AUTHOR = ParticipantId("AI")
AI_DISPLAY_NAME = "AI Judge"
